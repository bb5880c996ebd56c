"""Tests for PollScheduler."""

import asyncio

import pytest

from cryptopulse.market.fallback import FallbackCoordinator
from cryptopulse.market.scheduler import PollScheduler


@pytest.mark.asyncio
class TestPollScheduler:
    """Integration tests for the single-flight poll scheduler."""

    async def test_second_tick_skipped_while_in_flight(self, store, hub, fake_source, quote):
        """Test that a tick during a pending cycle makes zero extra adapter calls."""
        source = fake_source("slow", {"BTCUSDT": quote()}, delay=0.1)
        scheduler = PollScheduler(FallbackCoordinator([source], store, hub), interval=60.0)

        assert scheduler.tick() is True
        await asyncio.sleep(0)  # Let the cycle reach the adapter call
        assert scheduler.in_flight
        assert scheduler.tick() is False
        assert scheduler.skipped_ticks == 1

        await scheduler.wait_idle()
        assert scheduler.completed_cycles == 1
        assert source.calls == 1

    async def test_tick_after_completion_runs(self, store, hub, fake_source, quote):
        """Test that the next tick after a finished cycle starts a new one."""
        source = fake_source("a", {"BTCUSDT": quote()})
        scheduler = PollScheduler(FallbackCoordinator([source], store, hub), interval=60.0)

        scheduler.tick()
        await scheduler.wait_idle()
        assert scheduler.tick() is True
        await scheduler.wait_idle()

        assert source.calls == 2
        assert scheduler.skipped_ticks == 0

    async def test_start_runs_cycle_immediately(self, store, hub, fake_source, quote):
        """Test that start() fires the first cycle without waiting an interval."""
        source = fake_source("a", {"BTCUSDT": quote(price=43000.0)})
        scheduler = PollScheduler(FallbackCoordinator([source], store, hub), interval=60.0)

        await scheduler.start()
        await scheduler.wait_idle()

        assert store.get("BTCUSDT").price == 43000.0
        assert scheduler.last_result.source == "a"
        await scheduler.stop()

    async def test_cycles_repeat_on_interval(self, store, hub, fake_source, quote):
        """Test that the loop keeps polling."""
        source = fake_source("a", {"BTCUSDT": quote()})
        scheduler = PollScheduler(FallbackCoordinator([source], store, hub), interval=0.02)

        await scheduler.start()
        await asyncio.sleep(0.15)
        await scheduler.stop()

        assert source.calls >= 3
        assert len(store.history_of("BTCUSDT")) >= 2

    async def test_slow_cycles_never_overlap(self, store, hub, fake_source, quote):
        """Test that ticks faster than the fetch are skipped rather than queued."""
        active = 0
        peak = 0

        class Tracking(fake_source):
            async def fetch(self, instruments):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                try:
                    return await super().fetch(instruments)
                finally:
                    active -= 1

        source = Tracking("slow", {"BTCUSDT": quote()}, delay=0.05)
        scheduler = PollScheduler(FallbackCoordinator([source], store, hub), interval=0.01)

        await scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()

        assert peak == 1
        assert scheduler.skipped_ticks > 0

    async def test_failing_cycle_does_not_kill_loop(self, store, hub, fake_source):
        """Test that a cycle raising an exception is logged and polling continues."""

        class Exploding(FallbackCoordinator):
            calls = 0

            async def run_cycle(self):
                Exploding.calls += 1
                raise RuntimeError("boom")

        scheduler = PollScheduler(Exploding([], store, hub), interval=0.02)
        await scheduler.start()
        await asyncio.sleep(0.1)

        assert scheduler.running
        assert Exploding.calls >= 2
        await scheduler.stop()

    async def test_stop_is_idempotent(self, store, hub):
        """Test that stop() can be called multiple times, even before start()."""
        scheduler = PollScheduler(FallbackCoordinator([], store, hub), interval=1.0)
        await scheduler.stop()
        await scheduler.stop()

    async def test_stop_cancels_in_flight_cycle(self, store, hub, fake_source, quote):
        """Test that stop() does not wait for a hung adapter."""
        source = fake_source("hung", {"BTCUSDT": quote()}, delay=10.0, timeout=30.0)
        scheduler = PollScheduler(FallbackCoordinator([source], store, hub), interval=60.0)

        await scheduler.start()
        await asyncio.sleep(0.01)
        await asyncio.wait_for(scheduler.stop(), timeout=1.0)

        assert not scheduler.running
        assert not scheduler.in_flight
        assert store.get("BTCUSDT") is None

    async def test_invalid_interval(self, store, hub):
        """Test that a non-positive interval is rejected."""
        with pytest.raises(ValueError):
            PollScheduler(FallbackCoordinator([], store, hub), interval=0)
