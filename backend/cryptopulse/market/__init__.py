"""Market data subsystem for CryptoPulse.

Public API:
    Ticker, HistoryPoint, Candle - Immutable market data dataclasses
    PriceStore          - Latest ticker + bounded history per instrument
    BroadcastHub        - Fan-out of updates to WebSocket subscribers
    FallbackCoordinator - Ordered quote sources with synthetic fallback
    PollScheduler       - Single-flight fixed-interval driver
    MarketConfig        - Pipeline configuration (from_env)
    MarketService       - Wired pipeline plus read API
    create_market_service - Factory that builds a MarketService from config
    create_api_router   - FastAPI router factory for REST queries
    create_stream_router - FastAPI router factory for the WebSocket endpoint
"""

from .config import MarketConfig
from .errors import ConfigurationError, SourceError
from .factory import create_market_service
from .fallback import FallbackCoordinator
from .hub import BroadcastHub
from .instruments import INSTRUMENTS
from .interface import CandleSource, QuoteSource
from .models import Candle, CandleSeries, HistoryPoint, Quote, Ticker
from .routes import create_api_router
from .scheduler import PollScheduler
from .service import MarketService
from .store import PriceStore
from .stream import create_stream_router

__all__ = [
    "INSTRUMENTS",
    "Candle",
    "CandleSeries",
    "CandleSource",
    "ConfigurationError",
    "FallbackCoordinator",
    "HistoryPoint",
    "MarketConfig",
    "MarketService",
    "PollScheduler",
    "PriceStore",
    "BroadcastHub",
    "Quote",
    "QuoteSource",
    "SourceError",
    "Ticker",
    "create_api_router",
    "create_market_service",
    "create_stream_router",
]
