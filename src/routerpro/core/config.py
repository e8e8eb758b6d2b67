"""
Configuration management for Router Pro.

Supports environment variables, .env files, and a YAML backend catalog.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from routerpro.core.errors import ConfigurationError
from routerpro.core.models import (
    Backend,
    BackendHealth,
    OptimizationMode,
    TaskCategory,
)


class BackendConfig(BaseModel):
    """Catalog entry for a single backend."""

    id: str
    display_name: str
    unit_cost: float = Field(ge=0, description="Cost per request in USD")
    latency_estimate_ms: int = Field(gt=0)
    quality_score: float = Field(ge=0, le=100)
    fallback: str | None = Field(default=None, description="Backend substituted when this one is offline")
    provider: str | None = None
    health: BackendHealth = BackendHealth.AVAILABLE

    def to_backend(self) -> Backend:
        return Backend(
            id=self.id,
            display_name=self.display_name,
            unit_cost=self.unit_cost,
            latency_estimate_ms=self.latency_estimate_ms,
            quality_score=self.quality_score,
            health=self.health,
            fallback=self.fallback,
            provider=self.provider,
        )


class PolicyRuleConfig(BaseModel):
    """
    A policy table entry.

    ``categories=None`` covers every category of the mode that no other
    rule names explicitly.
    """

    mode: OptimizationMode
    categories: list[TaskCategory] | None = None
    tier: str
    label: str
    rationale: str


class RoutingConfig(BaseModel):
    """Backend catalog, tier assignment, and policy table."""

    backends: list[BackendConfig]
    tiers: dict[str, str]
    rules: list[PolicyRuleConfig]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RoutingConfig":
        """
        Load a routing configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file is empty or not a mapping
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Routing config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Routing config {path} must be a mapping with backends, tiers and rules"
            )
        return cls(**data)


DEFAULT_BACKENDS: list[dict[str, Any]] = [
    {
        "id": "gpt35",
        "display_name": "GPT-3.5 Turbo",
        "provider": "openai",
        "unit_cost": 0.002,
        "latency_estimate_ms": 150,
        "quality_score": 85,
        "fallback": "gemini",
    },
    {
        "id": "gpt4",
        "display_name": "GPT-4",
        "provider": "openai",
        "unit_cost": 0.03,
        "latency_estimate_ms": 300,
        "quality_score": 95,
        "fallback": "claude",
    },
    {
        "id": "claude",
        "display_name": "Claude Sonnet",
        "provider": "anthropic",
        "unit_cost": 0.015,
        "latency_estimate_ms": 250,
        "quality_score": 92,
        "fallback": "gpt35",
    },
    {
        "id": "gemini",
        "display_name": "Gemini Pro",
        "provider": "google",
        "unit_cost": 0.001,
        "latency_estimate_ms": 100,
        "quality_score": 88,
        "fallback": "gpt35",
    },
]

DEFAULT_TIERS: dict[str, str] = {
    "cheapest": "gemini",
    "low_cost": "gpt35",
    "code_specialist": "gemini",
    "reasoning_specialist": "claude",
    "top": "gpt4",
    "balanced": "gpt35",
}

DEFAULT_RULES: list[dict[str, Any]] = [
    # Cost first
    {"mode": "cost_first", "categories": ["simple"], "tier": "cheapest",
     "label": "Simple query", "rationale": "cheapest model"},
    {"mode": "cost_first", "categories": None, "tier": "low_cost",
     "label": "Complex query", "rationale": "cost-effective model"},
    # Performance first
    {"mode": "performance_first", "categories": ["code"], "tier": "code_specialist",
     "label": "Code query", "rationale": "best code model"},
    {"mode": "performance_first", "categories": ["analysis"], "tier": "reasoning_specialist",
     "label": "Analysis task", "rationale": "best reasoning model"},
    {"mode": "performance_first", "categories": ["creative"], "tier": "top",
     "label": "Creative task", "rationale": "best creative model"},
    {"mode": "performance_first", "categories": None, "tier": "top",
     "label": "Default", "rationale": "highest quality model"},
    # Smart balance
    {"mode": "smart_balance", "categories": ["simple"], "tier": "cheapest",
     "label": "Simple query", "rationale": "optimized for cost"},
    {"mode": "smart_balance", "categories": ["code"], "tier": "code_specialist",
     "label": "Code query", "rationale": "specialized model"},
    {"mode": "smart_balance", "categories": ["analysis"], "tier": "reasoning_specialist",
     "label": "Analysis", "rationale": "balanced quality/cost"},
    {"mode": "smart_balance", "categories": None, "tier": "balanced",
     "label": "General query", "rationale": "balanced option"},
]


def default_routing_config() -> RoutingConfig:
    """Build the built-in four-backend catalog and policy table."""
    return RoutingConfig(
        backends=[BackendConfig(**b) for b in DEFAULT_BACKENDS],
        tiers=dict(DEFAULT_TIERS),
        rules=[PolicyRuleConfig(**r) for r in DEFAULT_RULES],
    )


class RouterSettings(BaseSettings):
    """Core routing settings."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTERPRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend catalog; built-in defaults when unset
    backends_file: Path | None = None

    # Health monitoring
    offline_backends: list[str] = Field(default_factory=list, description="Backends forced offline")
    health_check_enabled: bool = False
    health_check_interval_seconds: float = Field(default=30.0, gt=0)

    # Invocation
    invocation_timeout_seconds: float = Field(default=30.0, gt=0)
    simulated_latency_ms: int = Field(default=800, ge=0)

    # Reporting
    baseline_unit_cost: float = Field(default=0.03, ge=0)
    monthly_requests: int = Field(default=50_000, ge=0)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"json", "console"}:
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'console'")
        return v


class ServerSettings(BaseSettings):
    """API server settings."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTERPRO_SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class Settings(BaseSettings):
    """Combined application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    router: RouterSettings = Field(default_factory=RouterSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    def load_routing_config(self) -> RoutingConfig:
        """Load the routing config from ``backends_file`` or the defaults."""
        if self.router.backends_file:
            return RoutingConfig.from_yaml(self.router.backends_file)
        return default_routing_config()


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
