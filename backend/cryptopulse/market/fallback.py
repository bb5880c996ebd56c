"""Ordered fallback over quote sources, ending in synthetic generation."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .errors import SourceError
from .hub import BroadcastHub
from .interface import QuoteSource
from .models import Quote, Ticker
from .store import PriceStore
from .synthetic import SyntheticQuoteGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Outcome of one fetch cycle: which source won and what was applied."""

    source: str | None
    tickers: tuple[Ticker, ...] = field(default_factory=tuple)
    failures: tuple[str, ...] = field(default_factory=tuple)

    @property
    def synthetic(self) -> bool:
        return self.source == SyntheticQuoteGenerator.name


class FallbackCoordinator:
    """Tries sources in priority order until one covers any instrument.

    The first source that returns data ends the chain; results from
    different providers are never merged within one cycle. When every source
    fails the synthetic generator (if configured) fills in. Each resulting
    Ticker is upserted and broadcast on its own, in registry order.
    """

    def __init__(
        self,
        sources: list[QuoteSource],
        store: PriceStore,
        hub: BroadcastHub,
        synthetic: SyntheticQuoteGenerator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sources = list(sources)
        self._store = store
        self._hub = hub
        self._synthetic = synthetic
        self._clock = clock

    @property
    def sources(self) -> list[QuoteSource]:
        return list(self._sources)

    async def run_cycle(self) -> CycleResult:
        """Fetch from the first working source and apply its quotes."""
        instruments = list(self._store.instruments)
        failures: list[str] = []

        for source in self._sources:
            quotes = await self._try_source(source, instruments)
            if quotes:
                return CycleResult(
                    source=source.name,
                    tickers=self._apply(source.name, quotes),
                    failures=tuple(failures),
                )
            failures.append(source.name)

        if self._synthetic is None:
            logger.error("All sources failed (%s) and synthetic fallback is disabled", ", ".join(failures))
            return CycleResult(source=None, failures=tuple(failures))

        if failures:
            logger.warning("All sources failed (%s); using synthetic quotes", ", ".join(failures))
        quotes = self._synthetic.generate()
        return CycleResult(
            source=self._synthetic.name,
            tickers=self._apply(self._synthetic.name, quotes),
            failures=tuple(failures),
        )

    async def _try_source(self, source: QuoteSource, instruments: list[str]) -> dict[str, Quote] | None:
        try:
            quotes = await asyncio.wait_for(source.fetch(instruments), timeout=source.timeout)
        except asyncio.TimeoutError:
            logger.warning("Source %s timed out after %.1fs", source.name, source.timeout)
            return None
        except SourceError as e:
            logger.warning("Source %s failed: %s", source.name, e)
            return None
        except Exception:
            logger.exception("Source %s raised unexpectedly", source.name)
            return None

        # Drop anything outside the registry; zero coverage counts as failure
        quotes = {s: q for s, q in quotes.items() if s in instruments}
        if not quotes:
            logger.warning("Source %s returned no tracked instruments", source.name)
            return None
        return quotes

    def _apply(self, source_name: str, quotes: dict[str, Quote]) -> tuple[Ticker, ...]:
        """Upsert then publish each quote. No await between the two."""
        applied: list[Ticker] = []
        for symbol in self._store.instruments:
            quote = quotes.get(symbol)
            if quote is None:
                continue
            ticker = Ticker.from_quote(symbol, quote, observed_at=self._clock(), source=source_name)
            ticker = self._store.upsert(ticker)
            self._hub.publish(ticker)
            applied.append(ticker)
        logger.debug("Applied %d tickers from %s", len(applied), source_name)
        return tuple(applied)
