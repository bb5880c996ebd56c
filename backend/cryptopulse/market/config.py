"""Configuration for the market data subsystem."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .instruments import INSTRUMENTS
from .seed_prices import BASE_PRICES, VOLATILITY

KNOWN_SOURCES: tuple[str, ...] = ("binance", "coingecko", "coinpaprika", "massive")
DEFAULT_SOURCES: tuple[str, ...] = ("binance", "coingecko", "coinpaprika")


@dataclass(frozen=True)
class MarketConfig:
    """All tunables of the ingestion pipeline.

    Nothing in the pipeline hardcodes these; build one with from_env() or
    construct it directly in tests.
    """

    instruments: tuple[str, ...] = INSTRUMENTS
    sources: tuple[str, ...] = DEFAULT_SOURCES
    source_timeout: float = 8.0
    poll_interval: float = 10.0
    history_limit: int = 1440  # points kept per instrument
    subscriber_queue_size: int = 100
    synthetic_enabled: bool = True
    synthetic_seed: int | None = None
    base_prices: Mapping[str, float] = field(default_factory=lambda: dict(BASE_PRICES))
    volatility: Mapping[str, float] = field(default_factory=lambda: dict(VOLATILITY))
    candle_interval: str = "1h"
    candle_limit: int = 24
    candle_volatility: float = 0.02
    massive_api_key: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MarketConfig:
        """Read overrides from environment variables.

        - CRYPTOPULSE_SOURCES: comma-separated priority order
        - MASSIVE_API_KEY set and non-empty -> 'massive' is appended to the chain
        - CRYPTOPULSE_SOURCE_TIMEOUT, CRYPTOPULSE_POLL_INTERVAL (seconds)
        - CRYPTOPULSE_HISTORY_LIMIT, CRYPTOPULSE_SUBSCRIBER_QUEUE
        - CRYPTOPULSE_SYNTHETIC ('0' disables), CRYPTOPULSE_SYNTHETIC_SEED
        - CRYPTOPULSE_CANDLE_INTERVAL, CRYPTOPULSE_CANDLE_LIMIT
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str:
            return env.get(name, "").strip()

        try:
            raw_sources = get("CRYPTOPULSE_SOURCES")
            sources = (
                tuple(s.strip().lower() for s in raw_sources.split(",") if s.strip())
                if raw_sources
                else DEFAULT_SOURCES
            )
            api_key = get("MASSIVE_API_KEY")
            if api_key and "massive" not in sources:
                sources = sources + ("massive",)

            defaults = cls()
            config = cls(
                sources=sources,
                source_timeout=float(get("CRYPTOPULSE_SOURCE_TIMEOUT") or defaults.source_timeout),
                poll_interval=float(get("CRYPTOPULSE_POLL_INTERVAL") or defaults.poll_interval),
                history_limit=int(get("CRYPTOPULSE_HISTORY_LIMIT") or defaults.history_limit),
                subscriber_queue_size=int(
                    get("CRYPTOPULSE_SUBSCRIBER_QUEUE") or defaults.subscriber_queue_size
                ),
                synthetic_enabled=get("CRYPTOPULSE_SYNTHETIC").lower() not in ("0", "false", "no", "off"),
                synthetic_seed=int(get("CRYPTOPULSE_SYNTHETIC_SEED")) if get("CRYPTOPULSE_SYNTHETIC_SEED") else None,
                candle_interval=get("CRYPTOPULSE_CANDLE_INTERVAL") or defaults.candle_interval,
                candle_limit=int(get("CRYPTOPULSE_CANDLE_LIMIT") or defaults.candle_limit),
                massive_api_key=api_key,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid market configuration value: {e}") from e
        return config.validate()

    def validate(self) -> MarketConfig:
        """Raise ConfigurationError if this configuration cannot run. Returns self."""
        if not self.instruments:
            raise ConfigurationError("Instrument registry is empty")
        unknown = [s for s in self.sources if s not in KNOWN_SOURCES]
        if unknown:
            raise ConfigurationError(f"Unknown data source(s): {', '.join(unknown)}")
        if not self.sources and not self.synthetic_enabled:
            raise ConfigurationError("No data sources configured and synthetic fallback is disabled")
        if "massive" in self.sources and not self.massive_api_key:
            raise ConfigurationError("Source 'massive' requires MASSIVE_API_KEY")
        if self.synthetic_enabled:
            missing = [s for s in self.instruments if s not in self.base_prices]
            if missing:
                raise ConfigurationError(f"No synthetic base price for: {', '.join(missing)}")
        for name in ("source_timeout", "poll_interval", "history_limit", "subscriber_queue_size", "candle_limit"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if not 0 <= self.candle_volatility < 1:
            raise ConfigurationError("candle_volatility must be in [0, 1)")
        return self
