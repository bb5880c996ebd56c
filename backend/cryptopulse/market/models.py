"""Data models for market data."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Quote:
    """One provider's normalized reading for an instrument, before it is stamped."""

    price: float
    change_percent: float
    volume: float

    @classmethod
    def parse(cls, price: Any, change_percent: Any, volume: Any) -> Quote:
        """Build a Quote from raw provider fields (numbers or numeric strings).

        Raises ValueError/TypeError if a field is missing, non-numeric, non-finite,
        the price is not positive, or the volume is negative.
        """
        price = float(price)
        change_percent = float(change_percent)
        volume = float(volume)
        if not all(math.isfinite(v) for v in (price, change_percent, volume)):
            raise ValueError("non-finite quote field")
        if price <= 0:
            raise ValueError(f"price must be positive, got {price}")
        if volume < 0:
            raise ValueError(f"volume must be non-negative, got {volume}")
        return cls(price=price, change_percent=change_percent, volume=volume)


@dataclass(frozen=True, slots=True)
class Ticker:
    """Latest known observation of a single instrument."""

    symbol: str
    price: float
    change_percent: float
    volume: float
    observed_at: float = field(default_factory=time.time)  # Unix seconds
    source: str = "unknown"

    @classmethod
    def from_quote(cls, symbol: str, quote: Quote, observed_at: float, source: str) -> Ticker:
        return cls(
            symbol=symbol,
            price=quote.price,
            change_percent=quote.change_percent,
            volume=quote.volume,
            observed_at=observed_at,
            source=source,
        )

    @property
    def direction(self) -> str:
        """'up', 'down', or 'flat' over the provider's 24h window."""
        if self.change_percent > 0:
            return "up"
        elif self.change_percent < 0:
            return "down"
        return "flat"

    def to_dict(self) -> dict:
        """Serialize for JSON / WebSocket transmission."""
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change_percent": self.change_percent,
            "volume": self.volume,
            "observed_at": self.observed_at,
            "source": self.source,
            "direction": self.direction,
        }


@dataclass(frozen=True, slots=True)
class HistoryPoint:
    price: float
    observed_at: float

    def to_dict(self) -> dict:
        return {"price": self.price, "observed_at": self.observed_at}


@dataclass(frozen=True, slots=True)
class Candle:
    """OHLCV aggregate for one time bucket starting at `open_time` (Unix seconds)."""

    open_time: float
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> dict:
        return {
            "open_time": self.open_time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True, slots=True)
class CandleSeries:
    """Candles for one symbol plus where they came from.

    When `synthesized` is True the candles were derived from the stored price
    history: open is the previous point's price and high/low are a random band
    around the close. They are an approximation, not real OHLC data.
    """

    symbol: str
    source: str
    synthesized: bool
    candles: tuple[Candle, ...] = ()

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "source": self.source,
            "synthesized": self.synthesized,
            "candles": [c.to_dict() for c in self.candles],
        }
