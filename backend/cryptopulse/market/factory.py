"""Factory for building the market data pipeline from configuration."""

from __future__ import annotations

import logging

from .candles import CandleService
from .config import MarketConfig
from .errors import ConfigurationError
from .fallback import FallbackCoordinator
from .hub import BroadcastHub
from .interface import CandleSource, QuoteSource
from .scheduler import PollScheduler
from .service import MarketService
from .store import PriceStore
from .synthetic import SyntheticQuoteGenerator

logger = logging.getLogger(__name__)


def create_source(name: str, config: MarketConfig) -> QuoteSource:
    """Instantiate one quote source by its configured name."""
    if name == "binance":
        from .binance import BinanceSource

        return BinanceSource(timeout=config.source_timeout)
    elif name == "coingecko":
        from .coingecko import CoinGeckoSource

        return CoinGeckoSource(timeout=config.source_timeout)
    elif name == "coinpaprika":
        from .coinpaprika import CoinPaprikaSource

        return CoinPaprikaSource(timeout=config.source_timeout)
    elif name == "massive":
        from .massive_client import MassiveSource

        return MassiveSource(api_key=config.massive_api_key, timeout=config.source_timeout)
    raise ConfigurationError(f"Unknown data source: {name}")


def create_market_service(config: MarketConfig | None = None) -> MarketService:
    """Build an unstarted MarketService.

    - Quote chain follows config.sources, in order
    - Synthetic generator terminates the chain unless disabled
    - Candle chain: Binance klines, then CoinPaprika OHLCV, then history

    Fails fast with ConfigurationError. Caller must await service.start().
    """
    config = (config or MarketConfig.from_env()).validate()

    store = PriceStore(instruments=config.instruments, history_limit=config.history_limit)
    hub = BroadcastHub(store, queue_size=config.subscriber_queue_size)

    sources = [create_source(name, config) for name in config.sources]
    synthetic = None
    if config.synthetic_enabled:
        synthetic = SyntheticQuoteGenerator(
            instruments=config.instruments,
            base_prices=config.base_prices,
            volatility=config.volatility,
            seed=config.synthetic_seed,
        )
    logger.info(
        "Market data sources: %s%s",
        " -> ".join(config.sources) or "(none)",
        " -> synthetic" if synthetic else "",
    )

    # Reuse quote adapters for candles so they share one HTTP client
    by_name = {s.name: s for s in sources}
    candle_sources: list[CandleSource] = []
    for name in ("binance", "coinpaprika"):
        source = by_name.get(name) or create_source(name, config)
        if isinstance(source, CandleSource):
            candle_sources.append(source)

    coordinator = FallbackCoordinator(sources, store, hub, synthetic=synthetic)
    scheduler = PollScheduler(coordinator, interval=config.poll_interval)
    candle_service = CandleService(
        store,
        candle_sources,
        interval=config.candle_interval,
        limit=config.candle_limit,
        volatility=config.candle_volatility,
    )
    return MarketService(store, hub, coordinator, scheduler, candle_service)
