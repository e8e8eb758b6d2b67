"""Tests for the health monitor."""

import asyncio

import pytest

from routerpro.core.config import default_routing_config
from routerpro.core.models import Backend, BackendHealth
from routerpro.health.monitor import HealthMonitor, StaticHealthProbe
from routerpro.routing.registry import BackendRegistry


@pytest.fixture
def registry():
    return BackendRegistry.from_config(default_routing_config())


class TestStaticHealthProbe:
    @pytest.mark.asyncio
    async def test_offline_set(self, registry):
        probe = StaticHealthProbe(["gpt4"])
        assert await probe(registry.get("gpt4")) is False
        assert await probe(registry.get("claude")) is True

        probe.set_offline("gpt4", False)
        assert await probe(registry.get("gpt4")) is True


class TestHealthMonitor:
    """Tests for HealthMonitor."""

    @pytest.mark.asyncio
    async def test_check_once_updates_registry(self, registry):
        monitor = HealthMonitor(registry, StaticHealthProbe(["gpt4", "claude"]))
        statuses = await monitor.check_once()

        assert statuses["gpt4"] == BackendHealth.UNAVAILABLE
        assert statuses["gemini"] == BackendHealth.AVAILABLE
        assert not registry.is_available("gpt4")
        assert not registry.is_available("claude")
        assert registry.is_available("gpt35")

    @pytest.mark.asyncio
    async def test_recovery(self, registry):
        probe = StaticHealthProbe(["gpt4"])
        monitor = HealthMonitor(registry, probe)
        await monitor.check_once()
        assert not registry.is_available("gpt4")

        probe.set_offline("gpt4", False)
        await monitor.check_once()
        assert registry.is_available("gpt4")

    @pytest.mark.asyncio
    async def test_probe_error_marks_unavailable(self, registry):
        async def probe(backend: Backend) -> bool:
            if backend.id == "claude":
                raise ConnectionError("refused")
            return True

        monitor = HealthMonitor(registry, probe)
        await monitor.check_once()
        assert not registry.is_available("claude")
        assert registry.is_available("gpt4")

    @pytest.mark.asyncio
    async def test_probe_timeout_marks_unavailable(self, registry):
        async def probe(backend: Backend) -> bool:
            if backend.id == "gemini":
                await asyncio.sleep(1)
            return True

        monitor = HealthMonitor(registry, probe, probe_timeout_seconds=0.01)
        await monitor.check_once()
        assert not registry.is_available("gemini")

    @pytest.mark.asyncio
    async def test_override_during_check_is_kept(self, registry):
        async def probe(backend: Backend) -> bool:
            if backend.id == "gpt4":
                # Operator marks gpt4 offline while the check is running.
                registry.set_health("gpt4", BackendHealth.UNAVAILABLE)
            return True

        monitor = HealthMonitor(registry, probe)
        statuses = await monitor.check_once()

        assert statuses["gpt4"] == BackendHealth.UNAVAILABLE
        assert not registry.is_available("gpt4")
        assert registry.is_available("claude")

    @pytest.mark.asyncio
    async def test_start_and_stop(self, registry):
        monitor = HealthMonitor(registry, StaticHealthProbe(["gpt35"]), interval_seconds=0.01)
        await monitor.start()
        assert monitor.running

        await asyncio.sleep(0.05)
        await monitor.stop()

        assert not monitor.running
        assert not registry.is_available("gpt35")

    def test_invalid_interval(self, registry):
        with pytest.raises(ValueError):
            HealthMonitor(registry, StaticHealthProbe(), interval_seconds=0)
