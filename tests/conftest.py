"""Shared fixtures: fake quote provider, manual clock, price cache and Flask client."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from app import create_app  # noqa: E402
from config import Settings  # noqa: E402
from utils.cache import PriceCache  # noqa: E402
from tests.helpers import FakeProvider, ManualClock  # noqa: E402


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def provider():
    return FakeProvider(2000.0)


@pytest.fixture
def price_cache(provider, clock):
    return PriceCache(fetcher=provider, clock=clock)


@pytest.fixture
def settings(monkeypatch):
    for name in ("GOLD_SYMBOL", "REFRESH_INTERVAL_MINUTES", "PORT", "CORS_ORIGINS", "SERVICE_NAME", "SERVICE_VERSION"):
        monkeypatch.delenv(name, raising=False)
    return Settings()


@pytest.fixture
def client(price_cache, settings):
    app = create_app(price_cache, settings)
    app.config['TESTING'] = True
    return app.test_client()
