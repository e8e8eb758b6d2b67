"""Tests for the policy table, policy engine and failover resolver."""

import pytest

from routerpro.core.config import (
    BackendConfig,
    PolicyRuleConfig,
    RoutingConfig,
    default_routing_config,
)
from routerpro.core.errors import (
    ConfigurationError,
    NoBackendAvailableError,
    UnknownBackendError,
)
from routerpro.core.models import BackendHealth, OptimizationMode, TaskCategory
from routerpro.routing.failover import FailoverResolver
from routerpro.routing.policy import PolicyEngine, PolicyTable
from routerpro.routing.registry import BackendRegistry

COST = OptimizationMode.COST_FIRST
PERF = OptimizationMode.PERFORMANCE_FIRST
BALANCE = OptimizationMode.SMART_BALANCE


@pytest.fixture
def config():
    return default_routing_config()


@pytest.fixture
def registry(config):
    return BackendRegistry.from_config(config)


@pytest.fixture
def table(config):
    return PolicyTable.from_config(config)


@pytest.fixture
def policy(registry, table):
    return PolicyEngine(registry, table)


# Full selection table with every backend available.
EXPECTED = [
    (COST, TaskCategory.SIMPLE, "gemini", "Simple query → cheapest model"),
    (COST, TaskCategory.GENERAL, "gpt35", "Complex query → cost-effective model"),
    (COST, TaskCategory.CODE, "gpt35", "Complex query → cost-effective model"),
    (COST, TaskCategory.ANALYSIS, "gpt35", "Complex query → cost-effective model"),
    (COST, TaskCategory.CREATIVE, "gpt35", "Complex query → cost-effective model"),
    (PERF, TaskCategory.CODE, "gemini", "Code query → best code model"),
    (PERF, TaskCategory.ANALYSIS, "claude", "Analysis task → best reasoning model"),
    (PERF, TaskCategory.CREATIVE, "gpt4", "Creative task → best creative model"),
    (PERF, TaskCategory.GENERAL, "gpt4", "Default → highest quality model"),
    (PERF, TaskCategory.SIMPLE, "gpt4", "Default → highest quality model"),
    (BALANCE, TaskCategory.SIMPLE, "gemini", "Simple query → optimized for cost"),
    (BALANCE, TaskCategory.CODE, "gemini", "Code query → specialized model"),
    (BALANCE, TaskCategory.ANALYSIS, "claude", "Analysis → balanced quality/cost"),
    (BALANCE, TaskCategory.GENERAL, "gpt35", "General query → balanced option"),
    (BALANCE, TaskCategory.CREATIVE, "gpt35", "General query → balanced option"),
]


class TestPolicyTable:
    """Tests for PolicyTable construction and lookup."""

    def test_every_cell_covered(self, table, registry):
        table.validate(registry)
        for mode in OptimizationMode:
            for category in TaskCategory:
                assert table.backend_for(category, mode)

    def test_tiers(self, table):
        assert table.tiers["top"] == "gpt4"
        assert table.tiers["cheapest"] == "gemini"

    def test_duplicate_rule_rejected(self, config):
        config.rules.append(PolicyRuleConfig(
            mode=COST, categories=[TaskCategory.SIMPLE],
            tier="top", label="Dup", rationale="dup",
        ))
        with pytest.raises(ConfigurationError):
            PolicyTable.from_config(config)

    def test_two_catch_alls_rejected(self, config):
        config.rules.append(PolicyRuleConfig(
            mode=COST, tier="top", label="Dup", rationale="dup",
        ))
        with pytest.raises(ConfigurationError):
            PolicyTable.from_config(config)

    def test_missing_cell_detected(self, config, registry):
        config.rules = [r for r in config.rules if r.mode != BALANCE]
        table = PolicyTable.from_config(config)
        with pytest.raises(ConfigurationError):
            table.validate(registry)

    def test_unassigned_tier_detected(self, config, registry):
        del config.tiers["balanced"]
        table = PolicyTable.from_config(config)
        with pytest.raises(ConfigurationError):
            table.validate(registry)

    def test_tier_pointing_at_unknown_backend(self, config, registry):
        config.tiers["top"] = "gpt5"
        table = PolicyTable.from_config(config)
        with pytest.raises(UnknownBackendError) as exc_info:
            table.validate(registry)
        assert exc_info.value.backend_id == "gpt5"

    def test_fallback_pointing_at_unknown_backend(self, config, table):
        config.backends.append(BackendConfig(
            id="mistral", display_name="Mistral", unit_cost=0.004,
            latency_estimate_ms=120, quality_score=80, fallback="ghost",
        ))
        registry = BackendRegistry.from_config(config)
        with pytest.raises(UnknownBackendError) as exc_info:
            table.validate(registry)
        assert exc_info.value.backend_id == "ghost"


class TestPolicyEngine:
    """Tests for first-choice selection."""

    @pytest.mark.parametrize("mode,category,backend_id,reason", EXPECTED)
    def test_selection_table(self, policy, mode, category, backend_id, reason):
        selection = policy.route(category, mode)
        assert selection.backend_id == backend_id
        assert selection.reason == reason
        assert selection.failed_over is False

    def test_deterministic(self, policy):
        for mode in OptimizationMode:
            for category in TaskCategory:
                assert policy.route(category, mode) == policy.route(category, mode)

    def test_data_driven_tier_swap(self, config):
        config.tiers["code_specialist"] = "claude"
        registry = BackendRegistry.from_config(config)
        policy = PolicyEngine(registry, PolicyTable.from_config(config))
        assert policy.route(TaskCategory.CODE, BALANCE).backend_id == "claude"

    def test_unavailable_first_choice_never_returned(self, policy, registry):
        registry.set_health("gemini", BackendHealth.UNAVAILABLE)
        selection = policy.route(TaskCategory.SIMPLE, COST)
        assert selection.backend_id != "gemini"
        assert selection.failed_over is True


class TestFailover:
    """Tests for failover resolution."""

    def test_top_tier_offline_fails_over_to_fallback(self, policy, registry):
        registry.set_health("gpt4", BackendHealth.UNAVAILABLE)
        selection = policy.route(TaskCategory.CREATIVE, PERF)

        assert selection.backend_id == "claude"
        assert selection.failed_over is True
        assert selection.reason == "Creative task → GPT-4 offline, failed over to Claude Sonnet"

    def test_default_row_failover_reason(self, policy, registry):
        registry.set_health("gpt4", BackendHealth.UNAVAILABLE)
        selection = policy.route(TaskCategory.GENERAL, PERF)
        assert selection.reason == "Default → GPT-4 offline, failed over to Claude Sonnet"

    def test_chained_failover(self, policy, registry):
        registry.set_health("gpt4", BackendHealth.UNAVAILABLE)
        registry.set_health("claude", BackendHealth.UNAVAILABLE)
        selection = policy.route(TaskCategory.CREATIVE, PERF)

        assert selection.backend_id == "gpt35"
        assert selection.failed_over is True
        assert "GPT-4" in selection.reason
        assert "Claude Sonnet" in selection.reason
        assert selection.reason.endswith("failed over to GPT-3.5 Turbo")

    def test_chain_reaches_last_backend(self, policy, registry):
        for backend_id in ("gpt4", "claude", "gpt35"):
            registry.set_health(backend_id, BackendHealth.UNAVAILABLE)
        assert policy.route(TaskCategory.GENERAL, PERF).backend_id == "gemini"

    def test_chain_exhausted(self, policy, registry):
        for backend in registry.list_backends():
            registry.set_health(backend.id, BackendHealth.UNAVAILABLE)

        with pytest.raises(NoBackendAvailableError) as exc_info:
            policy.route(TaskCategory.CREATIVE, PERF)

        error = exc_info.value
        assert error.category == TaskCategory.CREATIVE
        assert error.mode == PERF
        assert error.tried == ["gpt4", "claude", "gpt35", "gemini"]

    def test_cycle_terminates(self, policy, registry):
        # gemini -> gpt35 -> gemini
        registry.set_health("gemini", BackendHealth.UNAVAILABLE)
        registry.set_health("gpt35", BackendHealth.UNAVAILABLE)
        with pytest.raises(NoBackendAvailableError) as exc_info:
            policy.route(TaskCategory.SIMPLE, COST)
        assert exc_info.value.tried == ["gemini", "gpt35"]

    def test_backend_without_fallback(self):
        config = RoutingConfig(
            backends=[
                BackendConfig(id="solo", display_name="Solo", unit_cost=0.01,
                              latency_estimate_ms=100, quality_score=70),
            ],
            tiers={"only": "solo"},
            rules=[
                PolicyRuleConfig(mode=mode, tier="only", label="Any", rationale="only model")
                for mode in OptimizationMode
            ],
        )
        registry = BackendRegistry.from_config(config)
        policy = PolicyEngine(registry, PolicyTable.from_config(config))
        assert policy.route(TaskCategory.CODE, PERF).backend_id == "solo"

        registry.set_health("solo", BackendHealth.UNAVAILABLE)
        with pytest.raises(NoBackendAvailableError) as exc_info:
            policy.route(TaskCategory.CODE, PERF)
        assert exc_info.value.tried == ["solo"]

    def test_resolver_chain(self, registry, table):
        resolver = FailoverResolver(registry, table)
        assert resolver.chain("gpt4") == ["gpt4", "claude", "gpt35", "gemini"]
        assert resolver.chain("gemini") == ["gemini", "gpt35"]
