"""
Routing engine.

Wires classification, policy selection, failover and accounting into a
single ``route(text, mode)`` call and publishes each decision to the
configured reporting sinks.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Iterable

import structlog

from routerpro.analytics.reporting import ReportingSink
from routerpro.core.config import RoutingConfig, Settings, get_settings
from routerpro.core.errors import NoBackendAvailableError
from routerpro.core.models import OptimizationMode, RoutingDecision, TaskCategory
from routerpro.routing.accounting import DecisionAccountant
from routerpro.routing.classifier import Classifier, KeywordClassifier
from routerpro.routing.policy import PolicyEngine, PolicyTable
from routerpro.routing.registry import BackendRegistry

logger = structlog.get_logger()


@dataclass(frozen=True)
class _RoutingState:
    """Policy table and engine that are swapped together on reload."""

    table: PolicyTable
    policy: PolicyEngine


class RoutingEngine:
    """
    Routes request text to a backend.

    The engine keeps no per-request state; every call is independent and
    the registry's health flags are the only shared mutable data.

    Example:
        engine = RoutingEngine.from_config(default_routing_config())
        decision = engine.route("Debug my Python function", "smart_balance")
        print(decision.backend_id, decision.reason)
    """

    def __init__(
        self,
        registry: BackendRegistry,
        table: PolicyTable,
        classifier: Classifier | None = None,
        sinks: Iterable[ReportingSink] = (),
    ):
        # Misconfiguration is fatal here rather than at request time.
        table.validate(registry)

        self._registry = registry
        self._classifier = classifier or KeywordClassifier()
        self._swap_lock = Lock()
        self._state = _RoutingState(table, PolicyEngine(registry, table))
        self._accountant = DecisionAccountant(registry)
        self._sinks: list[ReportingSink] = list(sinks)

    @classmethod
    def from_config(
        cls,
        config: RoutingConfig,
        classifier: Classifier | None = None,
        sinks: Iterable[ReportingSink] = (),
    ) -> "RoutingEngine":
        return cls(
            BackendRegistry.from_config(config),
            PolicyTable.from_config(config),
            classifier=classifier,
            sinks=sinks,
        )

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    @property
    def table(self) -> PolicyTable:
        return self._state.table

    def add_sink(self, sink: ReportingSink) -> None:
        self._sinks.append(sink)

    def classify(self, text: str) -> TaskCategory:
        return self._classifier.classify(text)

    def route(self, text: str, mode: OptimizationMode | str) -> RoutingDecision:
        """
        Classify and route a request.

        Args:
            text: Raw request text
            mode: Optimization mode, parsed at this boundary

        Returns:
            RoutingDecision, possibly flagged as a failover

        Raises:
            InvalidOptimizationModeError: If mode is not recognized
            NoBackendAvailableError: If no backend in the chain is available
        """
        mode = OptimizationMode.parse(mode)
        category = self._classifier.classify(text)
        return self._decide(category, mode)

    def route_category(
        self,
        category: TaskCategory | str,
        mode: OptimizationMode | str,
    ) -> RoutingDecision:
        """Route a request that has already been classified."""
        mode = OptimizationMode.parse(mode)
        category = TaskCategory.parse(category)
        return self._decide(category, mode)

    def reload(self, config: RoutingConfig) -> None:
        """
        Hot-reload the catalog and policy table.

        The new configuration is validated before anything is swapped, so a
        bad reload leaves the running engine untouched. The catalog and the
        table change together: no request sees one without the other.
        """
        table = PolicyTable.from_config(config)
        table.validate(BackendRegistry.from_config(config))
        state = _RoutingState(table, PolicyEngine(self._registry, table))

        with self._swap_lock:
            self._registry.load(b.to_backend() for b in config.backends)
            self._state = state
        logger.info("Routing configuration reloaded", backends=len(self._registry))

    def _decide(self, category: TaskCategory, mode: OptimizationMode) -> RoutingDecision:
        # Held only to pair the table with a catalog snapshot, never across routing.
        with self._swap_lock:
            state = self._state
            catalog = self._registry.snapshot()

        try:
            selection = state.policy.route(category, mode, catalog)
        except NoBackendAvailableError as e:
            logger.warning(
                "No backend available",
                category=category.value,
                mode=mode.value,
                tried=e.tried,
            )
            raise

        decision = self._accountant.annotate(
            selection.backend_id,
            category,
            mode,
            selection.reason,
            selection.failed_over,
            catalog,
        )

        logger.debug(
            "Request routed",
            backend=decision.backend_id,
            category=category.value,
            mode=mode.value,
            failed_over=decision.failed_over,
        )

        self._publish(decision)
        return decision

    def _publish(self, decision: RoutingDecision) -> None:
        for sink in list(self._sinks):
            try:
                sink.record(decision)
            except Exception as e:
                logger.warning(
                    "Reporting sink failed",
                    sink=type(sink).__name__,
                    error=str(e),
                )


def create_engine(
    settings: Settings | None = None,
    classifier: Classifier | None = None,
    sinks: Iterable[ReportingSink] = (),
) -> RoutingEngine:
    """Build an engine from application settings."""
    settings = settings or get_settings()
    return RoutingEngine.from_config(
        settings.load_routing_config(),
        classifier=classifier,
        sinks=sinks,
    )
