"""CoinGecko simple/price adapter."""

from __future__ import annotations

import logging

from .errors import SourceError
from .http_client import HTTPSourceMixin
from .interface import QuoteSource
from .models import Quote

logger = logging.getLogger(__name__)

# Canonical symbol -> CoinGecko coin id
COINGECKO_IDS: dict[str, str] = {
    "BTCUSDT": "bitcoin",
    "ETHUSDT": "ethereum",
    "BNBUSDT": "binancecoin",
    "ADAUSDT": "cardano",
    "XRPUSDT": "ripple",
    "SOLUSDT": "solana",
    "DOTUSDT": "polkadot",
    "DOGEUSDT": "dogecoin",
    "AVAXUSDT": "avalanche-2",
    "MATICUSDT": "matic-network",
}


class CoinGeckoSource(HTTPSourceMixin, QuoteSource):
    """Quotes from GET /api/v3/simple/price in a single call.

    Volume is CoinGecko's 24h USD volume, not base-asset volume.
    """

    name = "coingecko"
    base_url = "https://api.coingecko.com"

    def __init__(self, timeout: float = 8.0, base_url: str | None = None) -> None:
        self.timeout = timeout
        if base_url:
            self.base_url = base_url

    async def fetch(self, instruments: list[str]) -> dict[str, Quote]:
        ids = {COINGECKO_IDS[s]: s for s in instruments if s in COINGECKO_IDS}
        if not ids:
            raise SourceError(self.name, "no requested instrument has a CoinGecko id")

        data = await self._get_json(
            "/api/v3/simple/price",
            params={
                "ids": ",".join(ids),
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_24hr_vol": "true",
            },
        )
        if not isinstance(data, dict):
            raise SourceError(self.name, "expected an object keyed by coin id")

        quotes: dict[str, Quote] = {}
        for coin_id, symbol in ids.items():
            entry = data.get(coin_id)
            if not isinstance(entry, dict):
                continue
            try:
                quotes[symbol] = Quote.parse(
                    entry.get("usd"),
                    entry.get("usd_24h_change"),
                    entry.get("usd_24h_vol"),
                )
            except (TypeError, ValueError) as e:
                logger.warning("CoinGecko: skipping %s: %s", symbol, e)

        if not quotes:
            raise SourceError(self.name, "no requested instruments in response")
        logger.debug("CoinGecko: %d/%d instruments", len(quotes), len(instruments))
        return quotes
