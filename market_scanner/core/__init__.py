"""Core shared logic for indicators, signal classification and investment heuristics.

This package contains pure business logic with no I/O dependencies
(no network or storage access). It is consumed by the API and service
layer in market_scanner.app.
"""
