"""
Backend health monitoring.

Runs as its own asyncio task, probes every backend on an interval and
reports the result to the registry through ``set_health``. It never sits
on the request path.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable

import structlog

from routerpro.core.errors import UnknownBackendError
from routerpro.core.models import Backend, BackendHealth
from routerpro.routing.registry import BackendRegistry

logger = structlog.get_logger()

HealthProbe = Callable[[Backend], Awaitable[bool]]


class StaticHealthProbe:
    """Probe that reports a fixed set of backends as offline."""

    def __init__(self, offline: Iterable[str] = ()):
        self.offline: set[str] = set(offline)

    def set_offline(self, backend_id: str, offline: bool = True) -> None:
        if offline:
            self.offline.add(backend_id)
        else:
            self.offline.discard(backend_id)

    async def __call__(self, backend: Backend) -> bool:
        return backend.id not in self.offline


class HealthMonitor:
    """
    Periodic health checker.

    Example:
        monitor = HealthMonitor(engine.registry, probe, interval_seconds=30)
        await monitor.start()
        ...
        await monitor.stop()
    """

    def __init__(
        self,
        registry: BackendRegistry,
        probe: HealthProbe,
        interval_seconds: float = 30.0,
        probe_timeout_seconds: float | None = 10.0,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._registry = registry
        self._probe = probe
        self._interval = interval_seconds
        self._probe_timeout = probe_timeout_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_backend(self, backend: Backend) -> BackendHealth:
        """Probe one backend; a failing or hanging probe counts as unavailable."""
        try:
            if self._probe_timeout is None:
                healthy = await self._probe(backend)
            else:
                healthy = await asyncio.wait_for(self._probe(backend), self._probe_timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "Health probe failed",
                backend=backend.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            healthy = False

        return BackendHealth.AVAILABLE if healthy else BackendHealth.UNAVAILABLE

    async def check_once(self) -> dict[str, BackendHealth]:
        """
        Probe every backend concurrently and update the registry.

        A backend whose health was changed by someone else while its check
        was in flight keeps that newer value; the check result is stale.
        """
        backends = self._registry.list_backends()
        results = await asyncio.gather(*(self.check_backend(b) for b in backends))

        statuses: dict[str, BackendHealth] = {}
        for backend, health in zip(backends, results):
            try:
                current = self._registry.get(backend.id)
                if current.health != backend.health:
                    logger.debug(
                        "Health changed during check, keeping override",
                        backend=backend.id,
                        health=current.health.value,
                    )
                    statuses[backend.id] = current.health
                    continue
                self._registry.set_health(backend.id, health)
            except UnknownBackendError:
                # Catalog reloaded while the probe was in flight.
                continue
            statuses[backend.id] = health
        return statuses

    async def _run(self) -> None:
        logger.info("Health monitor started", interval_seconds=self._interval)
        while True:
            await self.check_once()
            await asyncio.sleep(self._interval)

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Health monitor stopped")
