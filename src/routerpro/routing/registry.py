"""
Backend registry.

Holds the catalog of candidate backends and their health. The registry is
the only component that mutates health; everything else reads snapshots.
"""

from __future__ import annotations

from threading import Lock
from typing import Iterable, Mapping

import structlog

from routerpro.core.config import RoutingConfig
from routerpro.core.errors import ConfigurationError, UnknownBackendError
from routerpro.core.models import Backend, BackendHealth

logger = structlog.get_logger()


class CatalogSnapshot:
    """
    Read-only view of the catalog at one instant.

    A routing computation works against a single snapshot so that every
    hop of a failover chain sees the same catalog and health.
    """

    def __init__(self, backends: Mapping[str, Backend]):
        self._backends = dict(backends)

    def list_backends(self) -> list[Backend]:
        return list(self._backends.values())

    def get(self, backend_id: str) -> Backend:
        backend = self._backends.get(backend_id)
        if backend is None:
            raise UnknownBackendError(backend_id)
        return backend

    def is_available(self, backend_id: str) -> bool:
        return self.get(backend_id).is_available

    def __contains__(self, backend_id: object) -> bool:
        return backend_id in self._backends

    def __len__(self) -> int:
        return len(self._backends)


class BackendRegistry:
    """
    Thread-safe catalog of backends.

    Backends are immutable; a health change swaps in a new record under
    the lock, so readers always see a consistent snapshot and the lock is
    never held across a routing computation.
    """

    def __init__(self, backends: Iterable[Backend] = ()):
        self._lock = Lock()
        self._backends: dict[str, Backend] = {}
        self.load(backends)

    @classmethod
    def from_config(cls, config: RoutingConfig) -> "BackendRegistry":
        return cls(b.to_backend() for b in config.backends)

    def load(self, backends: Iterable[Backend]) -> None:
        """
        Replace the catalog.

        Health of backends whose id survives the reload is preserved.

        Raises:
            ConfigurationError: If two backends share an id
        """
        incoming: dict[str, Backend] = {}
        for backend in backends:
            if backend.id in incoming:
                raise ConfigurationError(f"Duplicate backend id: {backend.id!r}")
            incoming[backend.id] = backend

        with self._lock:
            for backend_id, backend in incoming.items():
                previous = self._backends.get(backend_id)
                if previous is not None and previous.health != backend.health:
                    incoming[backend_id] = backend.with_health(previous.health)
            self._backends = incoming

        logger.debug("Backend catalog loaded", backends=list(incoming))

    def list_backends(self) -> list[Backend]:
        """All backends in configuration order."""
        with self._lock:
            return list(self._backends.values())

    def snapshot(self) -> CatalogSnapshot:
        """Consistent copy of the current catalog and health."""
        with self._lock:
            return CatalogSnapshot(self._backends)

    def available_backends(self) -> list[Backend]:
        return [b for b in self.list_backends() if b.is_available]

    def get(self, backend_id: str) -> Backend:
        """
        Look up a backend by id.

        Raises:
            UnknownBackendError: If no backend has this id
        """
        with self._lock:
            backend = self._backends.get(backend_id)
        if backend is None:
            raise UnknownBackendError(backend_id)
        return backend

    def __contains__(self, backend_id: object) -> bool:
        with self._lock:
            return backend_id in self._backends

    def __len__(self) -> int:
        with self._lock:
            return len(self._backends)

    def is_available(self, backend_id: str) -> bool:
        return self.get(backend_id).is_available

    def set_health(self, backend_id: str, health: BackendHealth | str | bool) -> Backend:
        """
        Update a backend's health.

        Returns:
            The updated backend record

        Raises:
            UnknownBackendError: If no backend has this id
        """
        health = BackendHealth.parse(health)
        with self._lock:
            current = self._backends.get(backend_id)
            if current is None:
                raise UnknownBackendError(backend_id)
            if current.health == health:
                return current
            updated = current.with_health(health)
            self._backends[backend_id] = updated

        logger.info(
            "Backend health changed",
            backend=backend_id,
            previous=current.health.value,
            health=health.value,
        )
        return updated
