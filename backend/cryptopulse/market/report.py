"""Summary report over the current snapshot."""

from __future__ import annotations

from datetime import datetime, timezone

from .models import Ticker


def top_movers(snapshot: list[Ticker]) -> tuple[Ticker | None, Ticker | None]:
    """(top gainer, top loser) by change_percent in a single pass.

    Strict comparisons: on a tie the earliest Ticker in `snapshot` wins.
    """
    if not snapshot:
        return None, None
    gainer = loser = snapshot[0]
    for ticker in snapshot[1:]:
        if ticker.change_percent > gainer.change_percent:
            gainer = ticker
        if ticker.change_percent < loser.change_percent:
            loser = ticker
    return gainer, loser


def build_report(snapshot: list[Ticker], now: datetime | None = None) -> dict:
    """Downloadable report: full snapshot plus count and top movers."""
    now = now or datetime.now(timezone.utc)
    gainer, loser = top_movers(snapshot)
    return {
        "timestamp": now.isoformat(),
        "data": [t.to_dict() for t in snapshot],
        "summary": {
            "total_instruments": len(snapshot),
            "top_gainer": gainer.to_dict() if gainer else None,
            "top_loser": loser.to_dict() if loser else None,
        },
    }
