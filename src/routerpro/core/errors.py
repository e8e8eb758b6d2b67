"""
Exception types for Router Pro.

Configuration problems surface at startup; health-driven resolution
failures surface per request as typed errors the caller can render.
"""

from __future__ import annotations

from typing import Any


class RouterError(Exception):
    """Base exception for routing errors."""


class ConfigurationError(RouterError):
    """Raised when the backend catalog or policy table is malformed."""


class UnknownBackendError(ConfigurationError):
    """Raised when a backend id does not exist in the registry."""

    def __init__(self, backend_id: str, message: str | None = None):
        super().__init__(message or f"Unknown backend: {backend_id!r}")
        self.backend_id = backend_id


class NoBackendAvailableError(RouterError):
    """Raised when every backend in a failover chain is unavailable."""

    def __init__(
        self,
        category: Any,
        mode: Any,
        tried: list[str] | None = None,
    ):
        self.category = category
        self.mode = mode
        self.tried = list(tried or [])
        chain = " -> ".join(self.tried) if self.tried else "<empty>"
        super().__init__(
            f"No backend available for {_value(category)}/{_value(mode)} "
            f"(tried: {chain})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "category": _value(self.category),
            "mode": _value(self.mode),
            "tried": self.tried,
        }


class InvalidOptimizationModeError(RouterError, ValueError):
    """Raised when a caller supplies an unrecognized optimization mode."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid optimization mode: {value!r}")
        self.value = value


class InvalidTaskCategoryError(RouterError, ValueError):
    """Raised when a task category cannot be parsed."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid task category: {value!r}")
        self.value = value


class InvocationError(RouterError):
    """Raised when the invocation executor fails or times out."""

    def __init__(self, message: str, backend_id: str | None = None):
        super().__init__(message)
        self.backend_id = backend_id


def _value(item: Any) -> str:
    return str(getattr(item, "value", item))
