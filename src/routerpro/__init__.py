"""
Router Pro - intelligent routing for multi-LLM applications

Classifies each request, picks a backend according to a cost, quality or
balanced optimization mode, and fails over around unavailable backends.
"""

__version__ = "1.0.0"
__author__ = "Router Pro Team"

from routerpro.core.models import (
    Backend,
    BackendHealth,
    OptimizationMode,
    RoutingDecision,
    TaskCategory,
)
from routerpro.core.errors import (
    RouterError,
    NoBackendAvailableError,
    UnknownBackendError,
    InvalidOptimizationModeError,
)
from routerpro.routing.engine import RoutingEngine, create_engine

__all__ = [
    "Backend",
    "BackendHealth",
    "OptimizationMode",
    "RoutingDecision",
    "TaskCategory",
    "RouterError",
    "NoBackendAvailableError",
    "UnknownBackendError",
    "InvalidOptimizationModeError",
    "RoutingEngine",
    "create_engine",
]
