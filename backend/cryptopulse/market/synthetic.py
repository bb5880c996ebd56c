"""Seeded synthetic quote generator, the last link of the fallback chain."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np

from .errors import ConfigurationError
from .models import Quote
from .seed_prices import BASE_PRICES, BASE_VOLUMES, DEFAULT_VOLATILITY, DEFAULT_VOLUME, VOLATILITY

logger = logging.getLogger(__name__)


class SyntheticQuoteGenerator:
    """Plausible quotes perturbed around configured base prices.

    Math:
        u      ~ Uniform(-1, 1)            (one draw per instrument)
        pct    = u * band
        price  = base * (1 + pct)
        change = pct * 100                 (reported as the 24h change)
        volume = base_volume * Uniform(0.5, 1.5)

    Each cycle is independent of the previous one, so prices never drift
    outside base * (1 +/- band). A fixed seed makes the sequence of cycles
    reproducible.
    """

    name = "synthetic"

    def __init__(
        self,
        instruments: tuple[str, ...] | list[str],
        base_prices: Mapping[str, float] = BASE_PRICES,
        volatility: Mapping[str, float] = VOLATILITY,
        seed: int | None = None,
    ) -> None:
        missing = [s for s in instruments if s not in base_prices]
        if missing:
            raise ConfigurationError(f"No synthetic base price for: {', '.join(missing)}")

        self._instruments = list(instruments)
        self._base = np.array([base_prices[s] for s in self._instruments], dtype=float)
        self._band = np.array(
            [volatility.get(s, DEFAULT_VOLATILITY) for s in self._instruments], dtype=float
        )
        self._volume = np.array(
            [BASE_VOLUMES.get(s, DEFAULT_VOLUME) for s in self._instruments], dtype=float
        )
        if (self._base <= 0).any():
            raise ConfigurationError("Synthetic base prices must be positive")
        if ((self._band < 0) | (self._band >= 1)).any():
            raise ConfigurationError("Synthetic volatility bands must be in [0, 1)")
        self._rng = np.random.default_rng(seed)

    def base_price(self, symbol: str) -> float:
        return float(self._base[self._instruments.index(symbol)])

    def band(self, symbol: str) -> float:
        return float(self._band[self._instruments.index(symbol)])

    def generate(self) -> dict[str, Quote]:
        """One quote for every configured instrument. Returns {symbol: Quote}."""
        n = len(self._instruments)
        if n == 0:
            return {}

        pct = self._rng.uniform(-1.0, 1.0, n) * self._band
        prices = self._base * (1.0 + pct)
        volumes = self._volume * self._rng.uniform(0.5, 1.5, n)

        result: dict[str, Quote] = {}
        for i, symbol in enumerate(self._instruments):
            result[symbol] = Quote(
                price=float(prices[i]),
                change_percent=round(float(pct[i]) * 100, 4),
                volume=round(float(volumes[i]), 4),
            )
        logger.debug("Synthetic: generated %d quotes", n)
        return result
