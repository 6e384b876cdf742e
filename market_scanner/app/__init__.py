"""Application layer: market-data clients, services and the HTTP API."""
