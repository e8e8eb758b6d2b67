"""
Decision accounting.

Attaches cost, latency and quality metadata from the resolved backend to
the routing decision. Pure field copying, so pricing semantics can change
without touching selection logic.
"""

from __future__ import annotations

from routerpro.core.models import OptimizationMode, RoutingDecision, TaskCategory
from routerpro.routing.registry import BackendRegistry, CatalogSnapshot


class DecisionAccountant:
    """Builds immutable decisions from the registry's current records."""

    def __init__(self, registry: BackendRegistry):
        self._registry = registry

    def annotate(
        self,
        backend_id: str,
        category: TaskCategory,
        mode: OptimizationMode,
        reason: str,
        failed_over: bool,
        catalog: CatalogSnapshot | None = None,
    ) -> RoutingDecision:
        source = self._registry if catalog is None else catalog
        backend = source.get(backend_id)
        return RoutingDecision(
            backend_id=backend.id,
            task_category=category,
            optimization_mode=mode,
            reason=reason,
            failed_over=failed_over,
            estimated_cost=backend.unit_cost,
            estimated_latency_ms=backend.latency_estimate_ms,
            quality_score=backend.quality_score,
            backend_name=backend.display_name,
        )
