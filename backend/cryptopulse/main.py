"""FastAPI application entry point.

Run with:
    uvicorn cryptopulse.main:app --port 5001
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .market import MarketConfig, MarketService, create_api_router, create_market_service, create_stream_router

logger = logging.getLogger(__name__)


def create_app(config: MarketConfig | None = None, service: MarketService | None = None) -> FastAPI:
    """Build the app. The market service starts and stops with the app lifespan."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    service = service or create_market_service(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        try:
            yield
        finally:
            await service.stop()

    app = FastAPI(title="CryptoPulse", lifespan=lifespan)
    app.state.market = service

    origins = [o.strip() for o in os.environ.get("FRONTEND_ORIGINS", "").split(",") if o.strip()]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )
        logger.info("CORS enabled for: %s", ", ".join(origins))

    app.include_router(create_api_router(service))
    app.include_router(create_stream_router(service.hub))
    return app


app = create_app()
