"""Tests for MassiveSource (mocked)."""

from unittest.mock import MagicMock, patch

import pytest

from cryptopulse.market.errors import SourceError
from cryptopulse.market.massive_client import MassiveSource, to_massive_ticker


def _make_snapshot(ticker: str, price: float, change: float = 1.5, volume: float = 1000.0) -> MagicMock:
    """Create a mock Massive crypto snapshot object."""
    snap = MagicMock()
    snap.ticker = ticker
    snap.last_trade = MagicMock()
    snap.last_trade.price = price
    snap.todays_change_percent = change
    snap.day = MagicMock()
    snap.day.volume = volume
    return snap


class TestTickerTranslation:
    """Canonical symbol -> Massive ticker."""

    def test_usdt_pairs_map_to_usd(self):
        assert to_massive_ticker("BTCUSDT") == "X:BTCUSD"
        assert to_massive_ticker("DOGEUSDT") == "X:DOGEUSD"


@pytest.mark.asyncio
class TestMassiveSource:
    """Unit tests for MassiveSource with mocked API."""

    async def test_fetch_maps_snapshots(self):
        """Test that snapshots are mapped back to canonical symbols."""
        source = MassiveSource(api_key="test-key", timeout=1.0)
        snapshots = [
            _make_snapshot("X:BTCUSD", 43000.5, change=-2.0, volume=321.0),
            _make_snapshot("X:ETHUSD", 2600.25),
        ]

        with patch.object(source, "_fetch_snapshots", return_value=snapshots) as mock_fetch:
            quotes = await source.fetch(["BTCUSDT", "ETHUSDT"])

        mock_fetch.assert_called_once_with(["X:BTCUSD", "X:ETHUSD"])
        assert quotes["BTCUSDT"].price == 43000.5
        assert quotes["BTCUSDT"].change_percent == -2.0
        assert quotes["BTCUSDT"].volume == 321.0
        assert quotes["ETHUSDT"].price == 2600.25

    async def test_malformed_snapshot_skipped(self):
        """Test that malformed snapshots are skipped gracefully."""
        source = MassiveSource(api_key="test-key")
        good = _make_snapshot("X:BTCUSD", 43000.0)
        bad = _make_snapshot("X:ETHUSD", 2600.0)
        bad.last_trade = None  # Will cause AttributeError

        with patch.object(source, "_fetch_snapshots", return_value=[good, bad]):
            quotes = await source.fetch(["BTCUSDT", "ETHUSDT"])

        assert set(quotes) == {"BTCUSDT"}

    async def test_unrequested_tickers_ignored(self):
        """Test that snapshots for other tickers are not returned."""
        source = MassiveSource(api_key="test-key")
        with patch.object(source, "_fetch_snapshots", return_value=[_make_snapshot("X:LTCUSD", 70.0)]):
            with pytest.raises(SourceError):
                await source.fetch(["BTCUSDT"])

    async def test_api_error_raises_source_error(self):
        """Test that API errors surface as SourceError for the fallback chain."""
        source = MassiveSource(api_key="test-key")
        with patch.object(source, "_fetch_snapshots", side_effect=Exception("network error")):
            with pytest.raises(SourceError, match="network error"):
                await source.fetch(["BTCUSDT"])

    async def test_empty_snapshot_raises(self):
        """Test that an empty snapshot list is zero coverage."""
        source = MassiveSource(api_key="test-key")
        with patch.object(source, "_fetch_snapshots", return_value=[]):
            with pytest.raises(SourceError):
                await source.fetch(["BTCUSDT"])

    async def test_aclose_is_idempotent(self):
        """Test that aclose() can be called multiple times."""
        source = MassiveSource(api_key="test-key")
        await source.aclose()
        await source.aclose()


class TestMassiveClientConstruction:
    """The REST client is built lazily with the source's own timeout."""

    def test_client_uses_source_timeout(self):
        """Test that a stalled request cannot outlive the source timeout."""
        source = MassiveSource(api_key="test-key", timeout=3.0)
        with patch("massive.RESTClient") as mock_cls:
            mock_cls.return_value.get_snapshot_all.return_value = []
            source._fetch_snapshots(["X:BTCUSD"])
            source._fetch_snapshots(["X:BTCUSD"])

        mock_cls.assert_called_once_with(
            api_key="test-key",
            connect_timeout=3.0,
            read_timeout=3.0,
            retries=0,
        )
