"""Fixtures for market data tests."""

import asyncio

import pytest

from cryptopulse.market.errors import SourceError
from cryptopulse.market.hub import BroadcastHub
from cryptopulse.market.interface import QuoteSource
from cryptopulse.market.models import Quote, Ticker
from cryptopulse.market.store import PriceStore


class FakeSource(QuoteSource):
    """In-memory QuoteSource that records calls and can fail or stall."""

    def __init__(self, name, quotes=None, error=None, delay=0.0, timeout=1.0):
        self.name = name
        self.timeout = timeout
        self.quotes = dict(quotes or {})
        self.error = error
        self.delay = delay
        self.calls = 0
        self.closed = False

    async def fetch(self, instruments):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return dict(self.quotes)

    async def aclose(self):
        self.closed = True


def make_ticker(symbol="BTCUSDT", price=43000.0, change_percent=1.5, volume=100.0, observed_at=1000.0, source="test"):
    return Ticker(
        symbol=symbol,
        price=price,
        change_percent=change_percent,
        volume=volume,
        observed_at=observed_at,
        source=source,
    )


@pytest.fixture
def fake_source():
    """Factory for FakeSource instances."""
    return FakeSource


@pytest.fixture
def failing_source():
    def _make(name="broken", message="boom"):
        return FakeSource(name, error=SourceError(name, message))

    return _make


@pytest.fixture
def quote():
    def _make(price=100.0, change_percent=0.0, volume=10.0):
        return Quote(price=price, change_percent=change_percent, volume=volume)

    return _make


@pytest.fixture
def ticker():
    return make_ticker


@pytest.fixture
def store():
    return PriceStore(history_limit=5)


@pytest.fixture
def hub(store):
    return BroadcastHub(store, queue_size=3)
