"""Massive (Polygon.io) crypto snapshot adapter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .errors import SourceError
from .interface import QuoteSource
from .models import Quote

logger = logging.getLogger(__name__)


def to_massive_ticker(symbol: str) -> str:
    """BTCUSDT -> X:BTCUSD (Massive quotes crypto pairs against USD)."""
    base = symbol[: -len("USDT")] if symbol.endswith("USDT") else symbol
    return f"X:{base}USD"


class MassiveSource(QuoteSource):
    """QuoteSource backed by the Massive (Polygon.io) REST API.

    Calls GET /v2/snapshot/locale/global/markets/crypto/tickers for all
    requested instruments in a single API call. Requires an API key, so the
    factory only adds it to the chain when MASSIVE_API_KEY is set.

    Rate limits:
      - Free tier: 5 req/min -> keep the poll interval at 15s or more
      - Paid tiers: higher limits
    """

    name = "massive"

    def __init__(self, api_key: str, timeout: float = 8.0) -> None:
        self._api_key = api_key
        self.timeout = timeout
        self._client: Any = None  # Lazy import to avoid hard dependency at import time

    async def fetch(self, instruments: list[str]) -> dict[str, Quote]:
        wanted = {to_massive_ticker(s): s for s in instruments}
        try:
            # The Massive RESTClient is synchronous; run it in a thread to
            # avoid blocking the event loop.
            snapshots = await asyncio.to_thread(self._fetch_snapshots, list(wanted))
        except Exception as e:
            # Common failures: 401 (bad key), 429 (rate limit), network errors.
            raise SourceError(self.name, f"snapshot request failed: {e}") from e

        quotes: dict[str, Quote] = {}
        for snap in snapshots or []:
            symbol = wanted.get(getattr(snap, "ticker", None))
            if symbol is None:
                continue
            try:
                quotes[symbol] = Quote.parse(
                    snap.last_trade.price,
                    snap.todays_change_percent,
                    snap.day.volume,
                )
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Massive: skipping snapshot for %s: %s", symbol, e)

        if not quotes:
            raise SourceError(self.name, "no requested instruments in snapshot")
        logger.debug("Massive: %d/%d instruments", len(quotes), len(instruments))
        return quotes

    def _fetch_snapshots(self, tickers: list[str]) -> list:
        """Synchronous call to the Massive REST API. Runs in a thread."""
        from massive import RESTClient
        from massive.rest.models import SnapshotMarketType

        if self._client is None:
            # No retries: the fallback chain moves on to the next source instead
            self._client = RESTClient(
                api_key=self._api_key,
                connect_timeout=self.timeout,
                read_timeout=self.timeout,
                retries=0,
            )
        return self._client.get_snapshot_all(
            market_type=SnapshotMarketType.CRYPTO,
            tickers=tickers,
        )

    async def aclose(self) -> None:
        self._client = None
