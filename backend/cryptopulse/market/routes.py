"""REST endpoints over the market service's read API."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .service import MarketService


def create_api_router(service: MarketService) -> APIRouter:
    """Create the /api router bound to a MarketService."""
    router = APIRouter(prefix="/api", tags=["market"])

    @router.get("/prices")
    async def get_prices() -> list[dict]:
        """Latest Ticker of every observed instrument, in registry order."""
        return [t.to_dict() for t in service.snapshot()]

    @router.get("/history/{symbol}")
    async def get_history(symbol: str) -> list[dict]:
        """Stored price history, oldest first. Empty for unknown symbols."""
        return [p.to_dict() for p in service.history(symbol)]

    @router.get("/klines/{symbol}")
    async def get_klines(symbol: str) -> dict:
        """Candles for a symbol.

        When `synthesized` is true the candles were approximated from stored
        price history (open = previous price, high/low = random band around
        the close, volume 0) rather than fetched from an exchange.
        """
        series = await service.candles(symbol)
        return series.to_dict()

    @router.get("/report")
    async def get_report() -> JSONResponse:
        """Downloadable JSON report with top gainer and loser."""
        return JSONResponse(
            service.report(),
            headers={"Content-Disposition": "attachment; filename=crypto-report.json"},
        )

    @router.get("/health")
    async def health() -> dict:
        scheduler = service.scheduler
        last = scheduler.last_result
        return {
            "status": "ok",
            "instruments": len(service.store),
            "subscribers": service.hub.subscriber_count,
            "completed_cycles": scheduler.completed_cycles,
            "skipped_ticks": scheduler.skipped_ticks,
            "last_source": last.source if last else None,
        }

    return router
