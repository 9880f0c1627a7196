from __future__ import annotations
from typing import Optional


class PriceServiceError(Exception):
    """Base class for gold price service errors."""


class UpstreamFetchError(PriceServiceError):
    """A single refresh attempt against the quote provider failed."""
    def __init__(self, message: str, symbol: Optional[str] = None):
        super().__init__(message)
        self.symbol = symbol


class InitializationError(PriceServiceError):
    """The first fetch failed before any price was cached."""
