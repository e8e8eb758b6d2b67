"""Failover resolution for unavailable backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from routerpro.core.errors import NoBackendAvailableError
from routerpro.core.models import Backend, OptimizationMode, Selection, TaskCategory
from routerpro.routing.registry import BackendRegistry, CatalogSnapshot

if TYPE_CHECKING:
    from routerpro.routing.policy import PolicyTable

logger = structlog.get_logger()


class FailoverResolver:
    """
    Walk a backend's static fallback chain until something is available.

    Each backend names at most one fallback; following those links from the
    unavailable first choice gives the chain. A repeated id or a missing
    link ends the chain.
    """

    def __init__(self, registry: BackendRegistry, table: "PolicyTable"):
        self._registry = registry
        self._table = table

    def chain(self, backend_id: str, catalog: CatalogSnapshot | None = None) -> list[str]:
        """Fallback chain starting at ``backend_id`` (inclusive)."""
        if catalog is None:
            catalog = self._registry.snapshot()
        ids = [backend_id]
        current = catalog.get(backend_id)
        while current.fallback is not None and current.fallback not in ids:
            ids.append(current.fallback)
            current = catalog.get(current.fallback)
        return ids

    def resolve(
        self,
        unavailable_id: str,
        category: TaskCategory,
        mode: OptimizationMode,
        catalog: CatalogSnapshot | None = None,
    ) -> Selection:
        """
        Find a substitute for an unavailable backend.

        Returns:
            Selection flagged ``failed_over`` with a reason naming the
            offline backend(s) and the substitute

        Raises:
            NoBackendAvailableError: If every backend in the chain is unavailable
        """
        if catalog is None:
            catalog = self._registry.snapshot()
        rule = self._table.rule_for(category, mode)
        chain = self.chain(unavailable_id, catalog)
        offline: list[Backend] = []

        for backend_id in chain:
            backend = catalog.get(backend_id)
            if backend_id == unavailable_id or not backend.is_available:
                offline.append(backend)
                continue

            names = ", ".join(b.display_name for b in offline)
            reason = f"{rule.label} → {names} offline, failed over to {backend.display_name}"
            logger.info(
                "Failed over",
                original=unavailable_id,
                substitute=backend_id,
                skipped=[b.id for b in offline[1:]],
                category=category.value,
                mode=mode.value,
            )
            return Selection(backend_id=backend_id, reason=reason, failed_over=True)

        raise NoBackendAvailableError(category, mode, tried=chain)
