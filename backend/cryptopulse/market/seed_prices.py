"""Base prices and per-instrument parameters for the synthetic quote generator."""

# Plausible reference prices (USD) for the tracked instruments
BASE_PRICES: dict[str, float] = {
    "BTCUSDT": 43000.00,
    "ETHUSDT": 2600.00,
    "BNBUSDT": 310.00,
    "ADAUSDT": 0.52,
    "XRPUSDT": 0.55,
    "SOLUSDT": 98.00,
    "DOTUSDT": 7.20,
    "DOGEUSDT": 0.085,
    "AVAXUSDT": 36.00,
    "MATICUSDT": 0.85,
}

# Volatility band as a fraction of the base price.
# A synthetic quote always lands within base * (1 +/- band).
VOLATILITY: dict[str, float] = {
    "BTCUSDT": 0.02,
    "ETHUSDT": 0.03,
    "BNBUSDT": 0.03,
    "ADAUSDT": 0.05,
    "XRPUSDT": 0.05,
    "SOLUSDT": 0.06,  # High volatility
    "DOTUSDT": 0.05,
    "DOGEUSDT": 0.08,  # Meme coin, widest band
    "AVAXUSDT": 0.06,
    "MATICUSDT": 0.05,
}

# Default band for instruments not listed above
DEFAULT_VOLATILITY = 0.05

# Typical 24h base-asset volume; synthetic volume is drawn around it
BASE_VOLUMES: dict[str, float] = {
    "BTCUSDT": 25_000.0,
    "ETHUSDT": 350_000.0,
    "BNBUSDT": 600_000.0,
    "ADAUSDT": 300_000_000.0,
    "XRPUSDT": 500_000_000.0,
    "SOLUSDT": 4_000_000.0,
    "DOTUSDT": 10_000_000.0,
    "DOGEUSDT": 1_500_000_000.0,
    "AVAXUSDT": 3_000_000.0,
    "MATICUSDT": 150_000_000.0,
}

DEFAULT_VOLUME = 1_000_000.0
