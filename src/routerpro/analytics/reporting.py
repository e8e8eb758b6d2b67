"""
Reporting sinks for routing decisions.

The routing engine appends every decision to its sinks; sinks aggregate
(request counts, spend, savings against a single-backend baseline) and the
engine never reads anything back.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Mapping, Protocol, runtime_checkable

from routerpro.core.models import OptimizationMode, RoutingDecision


@runtime_checkable
class ReportingSink(Protocol):
    """Append-only consumer of routing decisions."""

    def record(self, decision: RoutingDecision) -> None:
        ...


@dataclass
class DecisionTotals:
    """Running totals for one slice of traffic."""

    requests: int = 0
    failovers: int = 0
    total_cost: float = 0.0
    total_latency_ms: int = 0

    @property
    def avg_cost(self) -> float:
        if self.requests == 0:
            return 0.0
        return self.total_cost / self.requests

    @property
    def avg_latency_ms(self) -> float:
        if self.requests == 0:
            return 0.0
        return self.total_latency_ms / self.requests

    def add(self, decision: RoutingDecision) -> None:
        self.requests += 1
        self.failovers += int(decision.failed_over)
        self.total_cost += decision.estimated_cost
        self.total_latency_ms += decision.estimated_latency_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests": self.requests,
            "failovers": self.failovers,
            "total_cost": self.total_cost,
            "avg_cost": self.avg_cost,
            "avg_latency_ms": self.avg_latency_ms,
        }


class UsageReport:
    """
    Thread-safe running totals of routed traffic.

    Savings are measured against ``baseline_unit_cost``, the price of
    sending every request to a single premium backend.
    """

    def __init__(self, baseline_unit_cost: float = 0.03, max_history: int = 1000):
        if baseline_unit_cost < 0:
            raise ValueError("baseline_unit_cost must be >= 0")
        self._lock = Lock()
        self._baseline_unit_cost = baseline_unit_cost
        self._max_history = max_history
        self._totals = DecisionTotals()
        self._by_mode: dict[str, DecisionTotals] = defaultdict(DecisionTotals)
        self._by_backend: dict[str, DecisionTotals] = defaultdict(DecisionTotals)
        self._by_category: dict[str, DecisionTotals] = defaultdict(DecisionTotals)
        self._recent: list[RoutingDecision] = []
        self._start_time = datetime.now(timezone.utc)

    @property
    def baseline_unit_cost(self) -> float:
        return self._baseline_unit_cost

    def record(self, decision: RoutingDecision) -> None:
        with self._lock:
            self._totals.add(decision)
            self._by_mode[decision.optimization_mode.value].add(decision)
            self._by_backend[decision.backend_id].add(decision)
            self._by_category[decision.task_category.value].add(decision)

            self._recent.append(decision)
            if len(self._recent) > self._max_history:
                self._recent = self._recent[-self._max_history:]

    def summary(self) -> dict[str, Any]:
        """Aggregated totals, savings, and per-slice breakdowns."""
        with self._lock:
            baseline_cost = self._totals.requests * self._baseline_unit_cost
            savings = baseline_cost - self._totals.total_cost
            return {
                "since": self._start_time.isoformat(),
                "total_requests": self._totals.requests,
                "failovers": self._totals.failovers,
                "total_cost": self._totals.total_cost,
                "baseline_cost": baseline_cost,
                "savings": savings,
                "savings_rate": savings / baseline_cost if baseline_cost > 0 else 0.0,
                "avg_latency_ms": self._totals.avg_latency_ms,
                "modes": {k: v.to_dict() for k, v in self._by_mode.items()},
                "backends": {k: v.to_dict() for k, v in self._by_backend.items()},
                "categories": {k: v.to_dict() for k, v in self._by_category.items()},
            }

    def recent(self, limit: int = 100) -> list[dict[str, Any]]:
        with self._lock:
            return [d.to_dict() for d in self._recent[-limit:]]

    def reset(self) -> None:
        with self._lock:
            self._totals = DecisionTotals()
            self._by_mode.clear()
            self._by_backend.clear()
            self._by_category.clear()
            self._recent.clear()
            self._start_time = datetime.now(timezone.utc)


# Average per-request cost observed for each mode on typical traffic.
DEFAULT_MODE_UNIT_COSTS: dict[OptimizationMode, float] = {
    OptimizationMode.COST_FIRST: 0.003,
    OptimizationMode.PERFORMANCE_FIRST: 0.025,
    OptimizationMode.SMART_BALANCE: 0.012,
}


@dataclass
class SavingsProjection:
    """Projected monthly spend with and without routing."""

    monthly_requests: int
    baseline_cost: float
    mode_costs: dict[OptimizationMode, float] = field(default_factory=dict)

    @property
    def savings(self) -> dict[OptimizationMode, float]:
        return {mode: self.baseline_cost - cost for mode, cost in self.mode_costs.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly_requests": self.monthly_requests,
            "without_router": self.baseline_cost,
            "with_router": {m.value: c for m, c in self.mode_costs.items()},
            "savings": {m.value: s for m, s in self.savings.items()},
        }


def project_savings(
    monthly_requests: int = 50_000,
    baseline_unit_cost: float = 0.03,
    mode_unit_costs: Mapping[OptimizationMode, float] | None = None,
) -> SavingsProjection:
    """
    Project monthly cost for each optimization mode against the baseline.

    Args:
        monthly_requests: Expected requests per month
        baseline_unit_cost: Per-request cost without routing
        mode_unit_costs: Average per-request cost under each mode; pass the
            ``avg_cost`` of a UsageReport's mode slices to project from
            observed traffic

    Returns:
        SavingsProjection
    """
    if monthly_requests < 0:
        raise ValueError("monthly_requests must be >= 0")
    unit_costs = dict(DEFAULT_MODE_UNIT_COSTS)
    if mode_unit_costs:
        unit_costs.update(mode_unit_costs)

    return SavingsProjection(
        monthly_requests=monthly_requests,
        baseline_cost=monthly_requests * baseline_unit_cost,
        mode_costs={mode: monthly_requests * cost for mode, cost in unit_costs.items()},
    )
