#!/usr/bin/env python3
"""
Market scan from the command line
=================================

Fetches live signals and prints them, without starting the API server.

Usage:
    python scripts/scan.py                      # crypto signals
    python scripts/scan.py --market thai        # Thai stock signals
    python scripts/scan.py --symbol SOL         # live search for one symbol
    python scripts/scan.py --potential          # 5x potential ranking
    python scripts/scan.py --fear-greed         # Fear & Greed index
"""

import argparse
import asyncio
import logging
import os
import sys

# Make the package importable when run from a checkout
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from market_scanner.app.clients import (  # noqa: E402
    BinanceSpotClient,
    FearGreedClient,
    MarketDataError,
    SignalFeedClient,
    YahooFinanceClient,
)
from market_scanner.app.config import get_settings  # noqa: E402
from market_scanner.app.services import SignalService  # noqa: E402
from market_scanner.core.investment import scan_5x_potential  # noqa: E402
from market_scanner.core.models import MarketType, Signal  # noqa: E402

MARKETS = {"crypto": MarketType.CRYPTO, "thai": MarketType.THAI_STOCK}


def print_signal(signal: Signal) -> None:
    print(
        f"  {signal.symbol:<10} {signal.signal_type.value:<5} "
        f"price={signal.price:<14.6g} chg={signal.change_percent:+6.2f}% "
        f"rsi={signal.rsi:5.1f} macd={signal.macd:+.4g} conf={signal.confidence:.2f}"
    )


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    market = MARKETS[args.market]

    if args.fear_greed:
        async with FearGreedClient(settings.fear_greed_url, timeout=settings.http_timeout) as client:
            index = await client.get_index()
        print(f"Fear & Greed: {index.value} ({index.classification}) - {index.suggestion}")
        return 0

    service = SignalService(
        feed=SignalFeedClient(settings.feed_base_url, timeout=settings.http_timeout),
        binance=BinanceSpotClient(settings.binance_base_url, timeout=settings.http_timeout),
        yahoo=YahooFinanceClient(settings.yahoo_base_url, timeout=settings.http_timeout),
        settings=settings,
    )
    try:
        if args.symbol:
            print(f"[search] {args.symbol} ({market.value})")
            print_signal(await service.search(args.symbol, market))
            return 0

        signals = await service.get_signals(market, args.limit)
        print(f"[signals] {len(signals)} {market.value} signals from {settings.feed_base_url}")
        for signal in signals:
            print_signal(signal)

        if args.potential:
            print("\n[potential] 5x candidates")
            for score in scan_5x_potential(signals, top_n=args.top):
                print(
                    f"  {score.symbol:<8} tier={score.tier.value} score={score.potential_score:5.1f} "
                    f"x{score.potential_multiplier:.1f} {score.category}: {score.reason}"
                )
        return 0
    except MarketDataError as e:
        print(f"[FAIL] {e}")
        return 1
    finally:
        await service.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Print live market signals")
    parser.add_argument("--market", choices=sorted(MARKETS), default="crypto")
    parser.add_argument("--limit", type=int, default=None, help="Maximum signals to fetch")
    parser.add_argument("--symbol", help="Search one symbol from live market data")
    parser.add_argument("--potential", action="store_true", help="Rank 5x potential coins")
    parser.add_argument("--top", type=int, default=10, help="Number of 5x candidates to show")
    parser.add_argument("--fear-greed", action="store_true", help="Show the Fear & Greed index")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
