"""Thread-safe in-memory price store with bounded per-symbol history."""

from __future__ import annotations

import dataclasses
from collections import deque
from threading import Lock

from .instruments import INSTRUMENTS
from .models import HistoryPoint, Ticker


class PriceStore:
    """Latest Ticker and a bounded FIFO history for every tracked instrument.

    Writer: FallbackCoordinator (one cycle at a time, via the PollScheduler).
    Readers: BroadcastHub, REST routes, report and candle synthesis.

    Each symbol has its own lock; there is no cross-symbol atomicity.
    """

    def __init__(self, instruments: tuple[str, ...] = INSTRUMENTS, history_limit: int = 1440) -> None:
        if history_limit <= 0:
            raise ValueError(f"history_limit must be positive, got {history_limit}")
        self._instruments = tuple(instruments)
        self._history_limit = history_limit
        self._locks: dict[str, Lock] = {s: Lock() for s in self._instruments}
        self._latest: dict[str, Ticker] = {}
        self._history: dict[str, deque[HistoryPoint]] = {
            s: deque(maxlen=history_limit) for s in self._instruments
        }
        self._version: int = 0  # Monotonically increasing; bumped on every upsert
        self._version_lock = Lock()

    @property
    def instruments(self) -> tuple[str, ...]:
        return self._instruments

    @property
    def history_limit(self) -> int:
        return self._history_limit

    def upsert(self, ticker: Ticker) -> Ticker:
        """Replace the symbol's current Ticker and append to its history.

        Returns the Ticker actually stored. If `observed_at` is older than the
        stored observation it is clamped forward so history never goes back
        in time. Raises KeyError for symbols outside the registry.
        """
        lock = self._locks.get(ticker.symbol)
        if lock is None:
            raise KeyError(f"Untracked symbol: {ticker.symbol}")

        with lock:
            prev = self._latest.get(ticker.symbol)
            if prev is not None and ticker.observed_at < prev.observed_at:
                ticker = dataclasses.replace(ticker, observed_at=prev.observed_at)
            self._latest[ticker.symbol] = ticker
            # deque(maxlen=...) evicts the oldest point on overflow
            self._history[ticker.symbol].append(HistoryPoint(ticker.price, ticker.observed_at))

        with self._version_lock:
            self._version += 1
        return ticker

    def get(self, symbol: str) -> Ticker | None:
        """Latest Ticker for a symbol, or None if never observed or untracked."""
        lock = self._locks.get(symbol)
        if lock is None:
            return None
        with lock:
            return self._latest.get(symbol)

    def snapshot(self) -> list[Ticker]:
        """Current Ticker of every observed symbol, in registry order."""
        result: list[Ticker] = []
        for symbol in self._instruments:
            ticker = self.get(symbol)
            if ticker is not None:
                result.append(ticker)
        return result

    def history_of(self, symbol: str) -> list[HistoryPoint]:
        """Bounded history for a symbol, oldest first. Empty if unknown."""
        lock = self._locks.get(symbol)
        if lock is None:
            return []
        with lock:
            return list(self._history[symbol])

    @property
    def version(self) -> int:
        """Number of upserts applied so far."""
        return self._version

    def __len__(self) -> int:
        return len(self.snapshot())

    def __contains__(self, symbol: str) -> bool:
        return self.get(symbol) is not None
