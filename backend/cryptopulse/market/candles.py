"""Candle series: upstream OHLC first, synthesized from history as a fallback."""

from __future__ import annotations

import logging
import random

from .errors import SourceError
from .interface import CandleSource
from .models import Candle, CandleSeries, HistoryPoint
from .store import PriceStore

logger = logging.getLogger(__name__)

SYNTHESIZED_SOURCE = "history"


def synthesize_candles(
    history: list[HistoryPoint],
    limit: int,
    volatility: float = 0.02,
    rng: random.Random | None = None,
) -> list[Candle]:
    """Approximate candles from the last `limit` history points.

    Each point becomes one candle: close is the point's price, open is the
    previous point's price (its own price for the first), and high/low sit
    a random fraction r in [0, volatility) above and below the close.
    Volume is unknown and reported as 0.0. This is not real OHLC data.
    """
    rng = rng or random.Random()
    recent = history[-limit:] if limit > 0 else []
    candles: list[Candle] = []
    for i, point in enumerate(recent):
        r = rng.random() * volatility
        candles.append(
            Candle(
                open_time=point.observed_at,
                open=recent[i - 1].price if i > 0 else point.price,
                high=point.price * (1 + r),
                low=point.price * (1 - r),
                close=point.price,
                volume=0.0,
            )
        )
    return candles


class CandleService:
    """Answers candle queries for the HTTP layer.

    Tries each CandleSource in order; if all fail (or return nothing) the
    series is synthesized from the PriceStore history and flagged as such.
    """

    def __init__(
        self,
        store: PriceStore,
        sources: list[CandleSource],
        interval: str = "1h",
        limit: int = 24,
        volatility: float = 0.02,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._sources = list(sources)
        self._interval = interval
        self._limit = limit
        self._volatility = volatility
        self._rng = rng or random.Random()

    @property
    def sources(self) -> list[CandleSource]:
        return list(self._sources)

    async def candles(self, symbol: str) -> CandleSeries:
        """Candle series for a tracked symbol; empty for anything else."""
        if symbol not in self._store.instruments:
            return CandleSeries(symbol=symbol, source=SYNTHESIZED_SOURCE, synthesized=True)

        for source in self._sources:
            try:
                candles = await source.fetch_candles(symbol, self._interval, self._limit)
            except SourceError as e:
                logger.warning("Candle source %s failed for %s: %s", source.name, symbol, e)
                continue
            except Exception:
                logger.exception("Candle source %s raised unexpectedly for %s", source.name, symbol)
                continue
            if candles:
                return CandleSeries(
                    symbol=symbol,
                    source=source.name,
                    synthesized=False,
                    candles=tuple(candles[-self._limit :]),
                )

        logger.info("Synthesizing candles for %s from price history", symbol)
        candles = synthesize_candles(
            self._store.history_of(symbol),
            limit=self._limit,
            volatility=self._volatility,
            rng=self._rng,
        )
        return CandleSeries(
            symbol=symbol,
            source=SYNTHESIZED_SOURCE,
            synthesized=True,
            candles=tuple(candles),
        )
