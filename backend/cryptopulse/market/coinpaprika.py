"""CoinPaprika adapter (per-coin tickers and daily OHLCV)."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from .errors import SourceError
from .http_client import HTTPSourceMixin
from .interface import CandleSource, QuoteSource
from .models import Candle, Quote

logger = logging.getLogger(__name__)

# Canonical symbol -> CoinPaprika coin id
COINPAPRIKA_IDS: dict[str, str] = {
    "BTCUSDT": "btc-bitcoin",
    "ETHUSDT": "eth-ethereum",
    "BNBUSDT": "bnb-binance-coin",
    "ADAUSDT": "ada-cardano",
    "XRPUSDT": "xrp-xrp",
    "SOLUSDT": "sol-solana",
    "DOTUSDT": "dot-polkadot",
    "DOGEUSDT": "doge-dogecoin",
    "AVAXUSDT": "avax-avalanche",
    "MATICUSDT": "matic-polygon",
}


def _parse_time(value: str) -> float:
    """ISO-8601 ('2024-02-10T00:00:00Z') -> Unix seconds."""
    return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()


class CoinPaprikaSource(HTTPSourceMixin, QuoteSource, CandleSource):
    """Quotes from GET /v1/tickers/{coin_id}, one request per instrument.

    Requests run concurrently; coins that fail are left out and the rest
    still count as a successful fetch. Volume is 24h USD volume.
    """

    name = "coinpaprika"
    base_url = "https://api.coinpaprika.com"

    def __init__(self, timeout: float = 8.0, base_url: str | None = None) -> None:
        self.timeout = timeout
        if base_url:
            self.base_url = base_url

    async def fetch(self, instruments: list[str]) -> dict[str, Quote]:
        symbols = [s for s in instruments if s in COINPAPRIKA_IDS]
        if not symbols:
            raise SourceError(self.name, "no requested instrument has a CoinPaprika id")

        results = await asyncio.gather(
            *(self._fetch_one(s) for s in symbols),
            return_exceptions=True,
        )

        quotes: dict[str, Quote] = {}
        for symbol, result in zip(symbols, results):
            if isinstance(result, Quote):
                quotes[symbol] = result
            elif isinstance(result, (SourceError, AttributeError, TypeError, ValueError, KeyError)):
                logger.warning("CoinPaprika: skipping %s: %s", symbol, result)
            elif isinstance(result, BaseException):
                raise result

        if not quotes:
            raise SourceError(self.name, "no requested instruments could be fetched")
        logger.debug("CoinPaprika: %d/%d instruments", len(quotes), len(instruments))
        return quotes

    async def _fetch_one(self, symbol: str) -> Quote:
        data = await self._get_json(f"/v1/tickers/{COINPAPRIKA_IDS[symbol]}")
        usd = data["quotes"]["USD"]
        return Quote.parse(usd.get("price"), usd.get("percent_change_24h"), usd.get("volume_24h"))

    async def fetch_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """Daily OHLCV covering the last 24h; `interval` is not selectable here."""
        coin_id = COINPAPRIKA_IDS.get(symbol)
        if coin_id is None:
            raise SourceError(self.name, f"no CoinPaprika id for {symbol}")

        end = datetime.now(timezone.utc)
        start = end - timedelta(hours=24)
        rows = await self._get_json(
            f"/v1/coins/{coin_id}/ohlcv/historical",
            params={
                "start": start.date().isoformat(),
                "end": end.date().isoformat(),
                "limit": limit,
                "quote": "usd",
            },
        )
        if not isinstance(rows, list):
            raise SourceError(self.name, "expected a list of OHLCV rows")

        try:
            candles = [
                Candle(
                    open_time=_parse_time(row["time_open"]),
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=float(row["volume"]),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise SourceError(self.name, f"malformed OHLCV row: {e}") from e

        if not candles:
            raise SourceError(self.name, f"no OHLCV for {symbol}")
        return candles
