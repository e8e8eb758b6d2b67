"""Core data models, errors, and configuration."""

from routerpro.core.errors import (
    RouterError,
    ConfigurationError,
    UnknownBackendError,
    NoBackendAvailableError,
    InvalidOptimizationModeError,
    InvalidTaskCategoryError,
    InvocationError,
)
from routerpro.core.models import (
    Backend,
    BackendHealth,
    OptimizationMode,
    PolicyRule,
    RoutingDecision,
    Selection,
    TaskCategory,
)

__all__ = [
    "RouterError",
    "ConfigurationError",
    "UnknownBackendError",
    "NoBackendAvailableError",
    "InvalidOptimizationModeError",
    "InvalidTaskCategoryError",
    "InvocationError",
    "Backend",
    "BackendHealth",
    "OptimizationMode",
    "PolicyRule",
    "RoutingDecision",
    "Selection",
    "TaskCategory",
]
