"""Abstract interfaces for upstream market data providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Candle, Quote


class QuoteSource(ABC):
    """Contract for a live quote provider (one adapter per upstream API).

    Adapters translate canonical symbols to the provider's identifiers and
    normalize its payload into Quotes. They never touch the PriceStore or
    the BroadcastHub; the FallbackCoordinator applies their output.

    Lifecycle:
        source = BinanceSource(timeout=8.0)
        quotes = await source.fetch(["BTCUSDT", "ETHUSDT"])
        # ... more fetches ...
        await source.aclose()
    """

    name: str = "source"
    timeout: float = 8.0

    @abstractmethod
    async def fetch(self, instruments: list[str]) -> dict[str, Quote]:
        """Fetch quotes for as many of `instruments` as the provider covers.

        Returns a mapping of canonical symbol to Quote. Partial coverage is a
        success. Raises SourceError if the call fails or covers nothing.
        """

    async def aclose(self) -> None:
        """Release network resources. Safe to call multiple times."""


class CandleSource(ABC):
    """Contract for an upstream OHLC provider."""

    name: str = "candles"

    @abstractmethod
    async def fetch_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """Return up to `limit` candles for `symbol`, oldest first.

        Raises SourceError on failure or when the provider has nothing.
        """

    async def aclose(self) -> None:
        """Release network resources. Safe to call multiple times."""
