"""
Policy engine.

Routing is a data-driven lookup: (optimization mode, task category) names a
tier, and the tier names a backend id. Adding a backend or re-pointing a
tier is a configuration change.
"""

from __future__ import annotations

from typing import Mapping

import structlog

from routerpro.core.config import RoutingConfig
from routerpro.core.errors import ConfigurationError, UnknownBackendError
from routerpro.core.models import OptimizationMode, PolicyRule, Selection, TaskCategory
from routerpro.routing.failover import FailoverResolver
from routerpro.routing.registry import BackendRegistry, CatalogSnapshot

logger = structlog.get_logger()

RuleKey = tuple[OptimizationMode, TaskCategory]


class PolicyTable:
    """Category × mode → tier rules, plus tier → backend assignment."""

    def __init__(self, rules: Mapping[RuleKey, PolicyRule], tiers: Mapping[str, str]):
        self._rules: dict[RuleKey, PolicyRule] = dict(rules)
        self._tiers: dict[str, str] = dict(tiers)

    @classmethod
    def from_config(cls, config: RoutingConfig) -> "PolicyTable":
        """
        Expand configured rules into a full table.

        Rules listing categories explicitly are applied first; a rule with
        ``categories=None`` fills every remaining category of its mode.

        Raises:
            ConfigurationError: On duplicate rules for the same cell
        """
        rules: dict[RuleKey, PolicyRule] = {}
        wildcards: dict[OptimizationMode, PolicyRule] = {}

        for entry in config.rules:
            rule = PolicyRule(tier=entry.tier, label=entry.label, rationale=entry.rationale)
            if entry.categories is None:
                if entry.mode in wildcards:
                    raise ConfigurationError(
                        f"More than one catch-all rule for mode {entry.mode.value!r}"
                    )
                wildcards[entry.mode] = rule
                continue
            for category in entry.categories:
                key = (entry.mode, category)
                if key in rules:
                    raise ConfigurationError(
                        f"Duplicate rule for {entry.mode.value}/{category.value}"
                    )
                rules[key] = rule

        for mode, rule in wildcards.items():
            for category in TaskCategory:
                rules.setdefault((mode, category), rule)

        return cls(rules, config.tiers)

    @property
    def tiers(self) -> dict[str, str]:
        return dict(self._tiers)

    def rule_for(self, category: TaskCategory, mode: OptimizationMode) -> PolicyRule:
        try:
            return self._rules[(mode, category)]
        except KeyError:
            raise ConfigurationError(
                f"No policy rule for {mode.value}/{category.value}"
            ) from None

    def backend_for(self, category: TaskCategory, mode: OptimizationMode) -> str:
        """Resolve the first-choice backend id for a cell."""
        tier = self.rule_for(category, mode).tier
        try:
            return self._tiers[tier]
        except KeyError:
            raise ConfigurationError(f"Tier {tier!r} is not assigned to a backend") from None

    def validate(self, registry: BackendRegistry) -> None:
        """
        Check the table against a registry at startup.

        Raises:
            ConfigurationError: If a cell has no rule or a tier is unassigned
            UnknownBackendError: If a tier or fallback points at a missing backend
        """
        for mode in OptimizationMode:
            for category in TaskCategory:
                self.backend_for(category, mode)

        for tier, backend_id in self._tiers.items():
            if backend_id not in registry:
                raise UnknownBackendError(
                    backend_id, f"Tier {tier!r} points at unknown backend {backend_id!r}"
                )

        for backend in registry.list_backends():
            if backend.fallback is not None and backend.fallback not in registry:
                raise UnknownBackendError(
                    backend.fallback,
                    f"Backend {backend.id!r} falls back to unknown backend {backend.fallback!r}",
                )


class PolicyEngine:
    """
    Picks a backend for a (category, mode) pair.

    Deterministic: identical inputs and identical registry health always
    give the same selection. Unavailable first choices are handed to the
    failover resolver and never returned.
    """

    def __init__(
        self,
        registry: BackendRegistry,
        table: PolicyTable,
        resolver: FailoverResolver | None = None,
    ):
        self._registry = registry
        self._table = table
        self._resolver = resolver or FailoverResolver(registry, table)

    @property
    def table(self) -> PolicyTable:
        return self._table

    def route(
        self,
        category: TaskCategory,
        mode: OptimizationMode,
        catalog: CatalogSnapshot | None = None,
    ) -> Selection:
        """
        Select a backend.

        Args:
            category: Task category of the request
            mode: Optimization mode
            catalog: Snapshot to route against; taken from the registry
                when omitted

        Raises:
            NoBackendAvailableError: If the first choice and its whole
                fallback chain are unavailable
        """
        if catalog is None:
            catalog = self._registry.snapshot()
        rule = self._table.rule_for(category, mode)
        backend_id = self._table.backend_for(category, mode)

        if catalog.is_available(backend_id):
            return Selection(backend_id=backend_id, reason=rule.reason)

        logger.info(
            "First-choice backend unavailable",
            backend=backend_id,
            category=category.value,
            mode=mode.value,
        )
        return self._resolver.resolve(backend_id, category, mode, catalog)
