"""Tests for the Yahoo Finance gold quote lookup."""

import pandas as pd
import pytest

from services import market
from utils.cache import PriceCache
from utils.errors import UpstreamFetchError


class FakeTicker:
    def __init__(self, fast_info=None, history=None):
        self.fast_info = fast_info
        self._history = history
        self.history_calls = 0

    def history(self, period, interval, actions=False):
        self.history_calls += 1
        return self._history


@pytest.fixture
def use_ticker(monkeypatch):
    seen = {}

    def install(ticker):
        def factory(symbol):
            seen['symbol'] = symbol
            return ticker
        monkeypatch.setattr(market.yf, "Ticker", factory)
        return seen
    return install


def test_uses_fast_info_last_price(use_ticker):
    ticker = FakeTicker(fast_info={"last_price": 2345.6})
    seen = use_ticker(ticker)

    assert market.fetch_gold_price() == 2345.6
    assert seen['symbol'] == "GC=F"
    assert ticker.history_calls == 0


def test_accepts_camel_case_fast_info_keys(use_ticker):
    use_ticker(FakeTicker(fast_info={"lastPrice": 2001.25}))
    assert market.fetch_gold_price() == 2001.25


def test_falls_back_to_last_close(use_ticker):
    hist = pd.DataFrame({"Close": [1990.0, 2005.5, float("nan")]})
    ticker = FakeTicker(fast_info={"last_price": float("nan")}, history=hist)
    use_ticker(ticker)

    assert market.fetch_gold_price() == 2005.5
    assert ticker.history_calls == 1


def test_symbol_is_normalized(use_ticker):
    seen = use_ticker(FakeTicker(fast_info={"last_price": 30.1}))
    market.fetch_gold_price("  si=f ")
    assert seen['symbol'] == "SI=F"


def test_negative_value_is_passed_through_for_validation(use_ticker):
    use_ticker(FakeTicker(fast_info={"last_price": -5}))
    assert market.fetch_gold_price() == -5


def test_no_data_raises(use_ticker):
    use_ticker(FakeTicker(fast_info={}, history=pd.DataFrame()))
    with pytest.raises(ValueError, match="No price found"):
        market.fetch_gold_price()


def test_zero_fast_info_price_is_not_treated_as_missing(use_ticker):
    hist = pd.DataFrame({"Close": [1990.0]})
    ticker = FakeTicker(fast_info={"last_price": 0, "regularMarketPrice": 2001.0}, history=hist)
    use_ticker(ticker)

    assert market.fetch_gold_price() == 0
    assert ticker.history_calls == 0


def test_zero_fast_info_price_fails_the_refresh(use_ticker):
    use_ticker(FakeTicker(fast_info={"last_price": 0}))
    cache = PriceCache(fetcher=market.fetch_gold_price)

    with pytest.raises(UpstreamFetchError, match="must be positive"):
        cache.refresh()
    assert cache.get_cached_data() is None
