"""Backend invocation collaborators."""

from routerpro.execution.executor import (
    InvocationExecutor,
    InvocationResult,
    SimulatedExecutor,
    dispatch,
)

__all__ = [
    "InvocationExecutor",
    "InvocationResult",
    "SimulatedExecutor",
    "dispatch",
]
