"""Registry of tracked instruments."""

from __future__ import annotations

# Order matters: snapshots, reports and synthetic cycles follow it.
INSTRUMENTS: tuple[str, ...] = (
    "BTCUSDT",
    "ETHUSDT",
    "BNBUSDT",
    "ADAUSDT",
    "XRPUSDT",
    "SOLUSDT",
    "DOTUSDT",
    "DOGEUSDT",
    "AVAXUSDT",
    "MATICUSDT",
)


def normalize_symbol(symbol: str) -> str:
    """Canonical form of a user-supplied symbol ('  btcusdt ' -> 'BTCUSDT')."""
    return symbol.strip().upper()
