"""
Invocation executors.

The routing engine only decides which backend handles a request; an
executor performs the call. Timeouts and call failures live here, never in
the routing core.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from routerpro.core.errors import InvocationError
from routerpro.core.models import Backend, OptimizationMode, RoutingDecision

if TYPE_CHECKING:
    from routerpro.routing.engine import RoutingEngine

logger = structlog.get_logger()


@dataclass
class InvocationResult:
    """Response text returned by a backend."""

    backend_id: str
    content: str
    latency_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "backend_id": self.backend_id,
            "content": self.content,
            "latency_ms": self.latency_ms,
        }


class InvocationExecutor(ABC):
    """Abstract base class for executors that call a resolved backend."""

    @abstractmethod
    async def invoke(self, backend: Backend, text: str) -> InvocationResult:
        """
        Send the request text to a backend.

        Args:
            backend: The backend chosen by the routing engine
            text: Original request text

        Returns:
            InvocationResult with the backend's response
        """
        ...


SIMULATED_RESPONSES: dict[str, str] = {
    "gpt4": (
        "This is a comprehensive response from GPT-4 with detailed analysis and "
        "high-quality insights perfect for complex reasoning tasks..."
    ),
    "claude": (
        "Here is a thoughtful response from Claude with clear reasoning and "
        "structured analysis, excellent for analytical work..."
    ),
    "gpt35": (
        "This is a helpful response from GPT-3.5 that balances quality with "
        "cost-effectiveness for general queries..."
    ),
    "gemini": (
        "Here is an efficient response from Gemini Pro optimized for performance "
        "and value, especially good for code and simple tasks..."
    ),
}


class SimulatedExecutor(InvocationExecutor):
    """Returns canned per-backend text after an artificial delay."""

    SUFFIX = " (Simulated response demonstrating intelligent routing)"

    def __init__(
        self,
        delay_ms: int = 0,
        responses: dict[str, str] | None = None,
    ):
        self._delay_ms = delay_ms
        self._responses = dict(SIMULATED_RESPONSES if responses is None else responses)

    async def invoke(self, backend: Backend, text: str) -> InvocationResult:
        start = time.perf_counter()
        if self._delay_ms:
            await asyncio.sleep(self._delay_ms / 1000)

        body = self._responses.get(
            backend.id,
            f"This is a response from {backend.display_name}.",
        )
        return InvocationResult(
            backend_id=backend.id,
            content=body + self.SUFFIX,
            latency_ms=(time.perf_counter() - start) * 1000,
        )


async def dispatch(
    engine: "RoutingEngine",
    executor: InvocationExecutor,
    text: str,
    mode: OptimizationMode | str,
    timeout: float | None = 30.0,
) -> tuple[RoutingDecision, InvocationResult]:
    """
    Route a request and invoke the chosen backend.

    Args:
        engine: RoutingEngine to pick the backend
        executor: Executor that performs the call
        text: Request text
        mode: Optimization mode
        timeout: Seconds to wait for the backend, or None for no limit

    Returns:
        Tuple of (decision, result)

    Raises:
        NoBackendAvailableError: If routing finds no available backend
        InvocationError: If the executor fails or times out
    """
    decision = engine.route(text, mode)
    backend = engine.registry.get(decision.backend_id)

    try:
        if timeout is None:
            result = await executor.invoke(backend, text)
        else:
            result = await asyncio.wait_for(executor.invoke(backend, text), timeout)
    except asyncio.TimeoutError:
        logger.warning("Invocation timed out", backend=backend.id, timeout=timeout)
        raise InvocationError(
            f"{backend.display_name} did not respond within {timeout}s",
            backend_id=backend.id,
        ) from None
    except InvocationError:
        raise
    except Exception as e:
        logger.warning(
            "Invocation failed",
            backend=backend.id,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise InvocationError(str(e), backend_id=backend.id) from e

    return decision, result
