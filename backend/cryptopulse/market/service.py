"""Wiring of store, hub, sources and scheduler behind one read API."""

from __future__ import annotations

import logging

from .candles import CandleService
from .fallback import FallbackCoordinator
from .hub import BroadcastHub
from .instruments import normalize_symbol
from .models import CandleSeries, HistoryPoint, Ticker
from .report import build_report
from .scheduler import PollScheduler
from .store import PriceStore

logger = logging.getLogger(__name__)


class MarketService:
    """The ingestion pipeline plus the queries the HTTP layer needs.

    Read queries only touch the PriceStore (candles may also call upstream
    OHLC sources); none of them go through the polling path.
    """

    def __init__(
        self,
        store: PriceStore,
        hub: BroadcastHub,
        coordinator: FallbackCoordinator,
        scheduler: PollScheduler,
        candle_service: CandleService,
    ) -> None:
        self.store = store
        self.hub = hub
        self.coordinator = coordinator
        self.scheduler = scheduler
        self.candle_service = candle_service

    async def start(self) -> None:
        await self.scheduler.start()
        logger.info(
            "Market service started: %d instruments, sources=%s",
            len(self.store.instruments),
            [s.name for s in self.coordinator.sources],
        )

    async def stop(self) -> None:
        await self.scheduler.stop()
        self.hub.close()
        closed: set[int] = set()
        for source in [*self.coordinator.sources, *self.candle_service.sources]:
            if id(source) in closed:
                continue
            closed.add(id(source))
            await source.aclose()
        logger.info("Market service stopped")

    # --- Read API ---

    def snapshot(self) -> list[Ticker]:
        return self.store.snapshot()

    def history(self, symbol: str) -> list[HistoryPoint]:
        return self.store.history_of(normalize_symbol(symbol))

    async def candles(self, symbol: str) -> CandleSeries:
        return await self.candle_service.candles(normalize_symbol(symbol))

    def report(self) -> dict:
        return build_report(self.store.snapshot())
