"""Binance public REST API adapter (quotes and klines)."""

from __future__ import annotations

import logging

from .errors import SourceError
from .http_client import HTTPSourceMixin
from .interface import CandleSource, QuoteSource
from .models import Candle, Quote

logger = logging.getLogger(__name__)


class BinanceSource(HTTPSourceMixin, QuoteSource, CandleSource):
    """Quotes from GET /api/v3/ticker/24hr, candles from GET /api/v3/klines.

    Binance already uses the canonical symbol names (BTCUSDT, ...), so no
    translation is needed. The 24hr endpoint is queried unfiltered: asking
    for a delisted symbol by name fails the whole request, while the full
    list simply omits it.
    """

    name = "binance"
    base_url = "https://api.binance.com"

    def __init__(self, timeout: float = 8.0, base_url: str | None = None) -> None:
        self.timeout = timeout
        if base_url:
            self.base_url = base_url

    async def fetch(self, instruments: list[str]) -> dict[str, Quote]:
        rows = await self._get_json("/api/v3/ticker/24hr")
        if not isinstance(rows, list):
            raise SourceError(self.name, "expected a list of tickers")

        wanted = set(instruments)
        quotes: dict[str, Quote] = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            symbol = row.get("symbol")
            if symbol not in wanted:
                continue
            try:
                quotes[symbol] = Quote.parse(
                    row.get("lastPrice"),
                    row.get("priceChangePercent"),
                    row.get("volume"),
                )
            except (TypeError, ValueError) as e:
                logger.warning("Binance: skipping %s: %s", symbol, e)

        if not quotes:
            raise SourceError(self.name, "no requested instruments in response")
        logger.debug("Binance: %d/%d instruments", len(quotes), len(instruments))
        return quotes

    async def fetch_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        rows = await self._get_json(
            "/api/v3/klines",
            params={"symbol": symbol, "interval": interval, "limit": limit},
        )
        if not isinstance(rows, list):
            raise SourceError(self.name, "expected a list of klines")

        try:
            candles = [
                Candle(
                    open_time=row[0] / 1000.0,  # Binance timestamps are Unix milliseconds
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=float(row[5]),
                )
                for row in rows
            ]
        except (IndexError, TypeError, ValueError) as e:
            raise SourceError(self.name, f"malformed kline row: {e}") from e

        if not candles:
            raise SourceError(self.name, f"no klines for {symbol}")
        return candles
