"""
Core data models for Router Pro.

Defines the backend catalog entries, the closed sets of task categories
and optimization modes, and the immutable routing decision value object.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from routerpro.core.errors import InvalidOptimizationModeError, InvalidTaskCategoryError


def _squash(value: str) -> str:
    """Lowercase and strip separators so 'CostFirst' == 'cost-first' == 'COST_FIRST'."""
    return re.sub(r"[^a-z0-9]", "", value.lower())


class BackendHealth(str, Enum):
    """Reachability state of a backend."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def parse(cls, value: "BackendHealth | str | bool") -> "BackendHealth":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.AVAILABLE if value else cls.UNAVAILABLE
        key = _squash(str(value))
        aliases = {
            "available": cls.AVAILABLE,
            "online": cls.AVAILABLE,
            "up": cls.AVAILABLE,
            "unavailable": cls.UNAVAILABLE,
            "offline": cls.UNAVAILABLE,
            "down": cls.UNAVAILABLE,
        }
        if key not in aliases:
            raise ValueError(f"Invalid backend health: {value!r}")
        return aliases[key]


class TaskCategory(str, Enum):
    """Coarse classification of a request's intent."""

    GENERAL = "general"
    CODE = "code"
    ANALYSIS = "analysis"
    CREATIVE = "creative"
    SIMPLE = "simple"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: "TaskCategory | str") -> "TaskCategory":
        """Parse a category, rejecting anything outside the closed set."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidTaskCategoryError(value)
        key = _squash(value)
        for member in cls:
            if key == _squash(member.value):
                return member
        raise InvalidTaskCategoryError(value)


class OptimizationMode(str, Enum):
    """Caller-selected routing policy."""

    COST_FIRST = "cost_first"
    PERFORMANCE_FIRST = "performance_first"
    SMART_BALANCE = "smart_balance"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, value: "OptimizationMode | str") -> "OptimizationMode":
        """
        Parse an optimization mode supplied at the boundary.

        Accepts 'cost_first', 'cost-first', 'CostFirst', 'COST_FIRST' and so
        on. Never falls back to a default.

        Raises:
            InvalidOptimizationModeError: If the value is not a known mode
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidOptimizationModeError(value)
        key = _squash(value)
        for member in cls:
            if key == _squash(member.value):
                return member
        raise InvalidOptimizationModeError(value)


@dataclass(frozen=True)
class Backend:
    """A candidate model backend with its cost/latency/quality profile."""

    id: str
    display_name: str
    unit_cost: float
    latency_estimate_ms: int
    quality_score: float
    health: BackendHealth = BackendHealth.AVAILABLE
    fallback: str | None = None
    provider: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Backend id must not be empty")
        if self.unit_cost < 0:
            raise ValueError(f"Backend {self.id!r}: unit_cost must be >= 0")
        if self.latency_estimate_ms <= 0:
            raise ValueError(f"Backend {self.id!r}: latency_estimate_ms must be > 0")
        if not 0 <= self.quality_score <= 100:
            raise ValueError(f"Backend {self.id!r}: quality_score must be within 0-100")
        if self.fallback == self.id:
            raise ValueError(f"Backend {self.id!r} cannot fall back to itself")

    @property
    def is_available(self) -> bool:
        return self.health == BackendHealth.AVAILABLE

    def with_health(self, health: BackendHealth) -> "Backend":
        return replace(self, health=health)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "unit_cost": self.unit_cost,
            "latency_estimate_ms": self.latency_estimate_ms,
            "quality_score": self.quality_score,
            "health": self.health.value,
            "fallback": self.fallback,
            "provider": self.provider,
        }


@dataclass(frozen=True)
class PolicyRule:
    """One cell of the policy table: which tier to use and why."""

    tier: str
    label: str  # e.g. "Creative task"
    rationale: str  # e.g. "best creative model"

    @property
    def reason(self) -> str:
        return f"{self.label} → {self.rationale}"


@dataclass(frozen=True)
class Selection:
    """Backend chosen by the policy engine, before accounting."""

    backend_id: str
    reason: str
    failed_over: bool = False


@dataclass(frozen=True)
class RoutingDecision:
    """The routing engine's output for a single request."""

    backend_id: str
    task_category: TaskCategory
    optimization_mode: OptimizationMode
    reason: str
    failed_over: bool
    estimated_cost: float
    estimated_latency_ms: int
    quality_score: float
    backend_name: str = ""
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "backend_id": self.backend_id,
            "backend_name": self.backend_name,
            "task_category": self.task_category.value,
            "optimization_mode": self.optimization_mode.value,
            "reason": self.reason,
            "failed_over": self.failed_over,
            "estimated_cost": self.estimated_cost,
            "estimated_latency_ms": self.estimated_latency_ms,
            "quality_score": self.quality_score,
            "created_at": self.created_at.isoformat(),
        }
