from __future__ import annotations
from typing import Any, Optional

import pandas as pd
import yfinance as yf

GOLD_SYMBOL = "GC=F"
FAST_INFO_PRICE_KEYS = ("last_price", "lastPrice", "regularMarketPrice")


def _normalize_symbol(symbol: str) -> str:
    return (symbol or '').strip().upper()


def _last_close(t: yf.Ticker) -> Optional[float]:
    h = t.history(period="5d", interval="1d", actions=False)
    if h is None or h.empty or "Close" not in h:
        return None
    closes = h["Close"].dropna()
    if closes.empty:
        return None
    return float(closes.iloc[-1])


def fetch_gold_price(symbol: str = GOLD_SYMBOL) -> Any:
    """
    Latest gold quote (USD per troy ounce) from Yahoo Finance.
    Tries fast_info first; falls back to the last daily close.
    The raw value is returned as-is, validation is left to the caller.
    """
    symbol = _normalize_symbol(symbol) or GOLD_SYMBOL
    t = yf.Ticker(symbol)
    fi = t.fast_info or {}

    price = None
    for key in FAST_INFO_PRICE_KEYS:
        # 0 and negatives are kept so the caller rejects them
        price = fi.get(key)
        if price is not None:
            break
    if price is None or (isinstance(price, float) and pd.isna(price)):
        price = _last_close(t)

    if price is None:
        raise ValueError(f"No price found for symbol: {symbol}")
    return price
