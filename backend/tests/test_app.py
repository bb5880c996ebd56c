"""Tests for the FastAPI app: REST routes and the WebSocket stream."""

import pytest
from fastapi.testclient import TestClient

from cryptopulse.main import create_app
from cryptopulse.market.candles import CandleService
from cryptopulse.market.config import MarketConfig
from cryptopulse.market.factory import create_market_service
from cryptopulse.market.models import Ticker
from cryptopulse.market.service import MarketService


def _ticker(symbol, price, change, observed_at=1000.0):
    return Ticker(symbol, price, change, 10.0, observed_at, source="test")


@pytest.fixture
def service():
    return create_market_service(MarketConfig(sources=(), synthetic_seed=1, poll_interval=60.0))


@pytest.fixture
def client(service):
    """Client without lifespan: the poller is not running, the store is filled by hand."""
    return TestClient(create_app(service=service))


class TestRestRoutes:
    """Read API over HTTP."""

    def test_prices(self, client, service):
        service.store.upsert(_ticker("ETHUSDT", 2600.0, -1.0))
        service.store.upsert(_ticker("BTCUSDT", 43000.0, 2.0))

        response = client.get("/api/prices")

        assert response.status_code == 200
        assert [t["symbol"] for t in response.json()] == ["BTCUSDT", "ETHUSDT"]

    def test_history_case_insensitive(self, client, service):
        """Test that symbols in the path are normalized."""
        service.store.upsert(_ticker("BTCUSDT", 1.0, 0.0, observed_at=1.0))
        service.store.upsert(_ticker("BTCUSDT", 2.0, 0.0, observed_at=2.0))

        response = client.get("/api/history/btcusdt")

        assert response.status_code == 200
        assert response.json() == [{"price": 1.0, "observed_at": 1.0}, {"price": 2.0, "observed_at": 2.0}]

    def test_history_unknown_symbol_empty(self, client):
        """Test that unknown symbols are an empty result, not an error."""
        response = client.get("/api/history/NOPE")
        assert response.status_code == 200
        assert response.json() == []

    def test_klines_unknown_symbol_empty(self, client):
        response = client.get("/api/klines/NOPE")
        assert response.status_code == 200
        assert response.json()["candles"] == []

    def test_klines_synthesized_from_history(self, service):
        """Test that with no candle sources the series is flagged as synthesized."""
        offline = MarketService(
            service.store,
            service.hub,
            service.coordinator,
            service.scheduler,
            CandleService(service.store, []),
        )
        offline.store.upsert(_ticker("BTCUSDT", 100.0, 0.0, observed_at=1.0))
        offline.store.upsert(_ticker("BTCUSDT", 101.0, 0.0, observed_at=2.0))

        body = TestClient(create_app(service=offline)).get("/api/klines/BTCUSDT").json()

        assert body["synthesized"] is True
        assert [c["close"] for c in body["candles"]] == [100.0, 101.0]
        assert body["candles"][1]["open"] == 100.0

    def test_report_is_attachment(self, client, service):
        """Test the report payload and download header."""
        service.store.upsert(_ticker("BTCUSDT", 43000.0, 5.0))
        service.store.upsert(_ticker("ETHUSDT", 2600.0, -3.0))
        service.store.upsert(_ticker("BNBUSDT", 310.0, 5.0))

        response = client.get("/api/report")

        assert response.status_code == 200
        assert "crypto-report.json" in response.headers["content-disposition"]
        summary = response.json()["summary"]
        assert summary["total_instruments"] == 3
        assert summary["top_gainer"]["symbol"] == "BTCUSDT"
        assert summary["top_loser"]["symbol"] == "ETHUSDT"

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["subscribers"] == 0


class TestWebSocketStream:
    """Push channel."""

    def test_initial_data_on_connect(self, client, service):
        """Test that the first message is the current snapshot."""
        service.store.upsert(_ticker("BTCUSDT", 43000.0, 1.0))

        with client.websocket_connect("/ws") as ws:
            message = ws.receive_json()

        assert message["type"] == "initial_data"
        assert message["data"] == [t.to_dict() for t in service.store.snapshot()]

    def test_live_updates_follow(self):
        """Test that polling cycles are pushed as price_update messages."""
        service = create_market_service(MarketConfig(sources=(), synthetic_seed=1, poll_interval=0.05))
        app = create_app(service=service)

        with TestClient(app) as client:
            with client.websocket_connect("/ws") as ws:
                initial = ws.receive_json()
                update = ws.receive_json()

        assert initial["type"] == "initial_data"
        assert update["type"] == "price_update"
        assert update["data"]["source"] == "synthetic"
        assert update["data"]["symbol"] in service.store.instruments

    def test_disconnect_unsubscribes(self, client, service):
        """Test that closing the socket removes the subscriber."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            assert service.hub.subscriber_count == 1
        # The server side notices the close asynchronously
        for _ in range(100):
            if service.hub.subscriber_count == 0:
                break
            client.get("/api/health")
        assert service.hub.subscriber_count == 0

    def test_binary_frames_ignored(self, client, service):
        """Test that a binary frame from the client neither errors nor blocks unsubscribe."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_bytes(b"ping")
            ws.send_text("hello")
            assert service.hub.subscriber_count == 1
        for _ in range(100):
            if service.hub.subscriber_count == 0:
                break
            client.get("/api/health")
        assert service.hub.subscriber_count == 0
