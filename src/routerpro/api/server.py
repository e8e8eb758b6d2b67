"""
FastAPI server for Router Pro.

Exposes the routing engine to presentation layers: route and classify
requests, inspect and override backend health, and read running totals.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
import structlog

from routerpro import __version__
from routerpro.analytics.reporting import UsageReport
from routerpro.core.config import get_settings
from routerpro.core.errors import (
    InvalidOptimizationModeError,
    NoBackendAvailableError,
    UnknownBackendError,
)
from routerpro.core.models import BackendHealth
from routerpro.health.monitor import HealthMonitor, StaticHealthProbe
from routerpro.routing.engine import RoutingEngine, create_engine
from routerpro.utils.logging import bind_routing_context, setup_logging

logger = structlog.get_logger()

# Global instances
engine: RoutingEngine | None = None
usage_report: UsageReport | None = None
health_monitor: HealthMonitor | None = None
health_probe: StaticHealthProbe | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    global engine, usage_report, health_monitor, health_probe

    setup_logging()
    settings = get_settings()

    usage_report = UsageReport(baseline_unit_cost=settings.router.baseline_unit_cost)
    engine = create_engine(settings, sinks=[usage_report])

    for backend_id in settings.router.offline_backends:
        engine.registry.set_health(backend_id, BackendHealth.UNAVAILABLE)

    if settings.router.health_check_enabled:
        health_probe = StaticHealthProbe(settings.router.offline_backends)
        health_monitor = HealthMonitor(
            engine.registry,
            health_probe,
            interval_seconds=settings.router.health_check_interval_seconds,
        )
        await health_monitor.start()

    logger.info(
        "Router Pro API started",
        backends=len(engine.registry),
        health_checks=health_monitor is not None,
    )

    yield

    if health_monitor is not None:
        await health_monitor.stop()
    health_monitor = None
    health_probe = None
    logger.info("Shutting down Router Pro API server")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Router Pro API",
        description="Intelligent routing for multi-LLM applications",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NoBackendAvailableError)
    async def no_backend_handler(request: Request, exc: NoBackendAvailableError) -> JSONResponse:
        return JSONResponse(status_code=503, content=exc.to_dict())

    @app.exception_handler(InvalidOptimizationModeError)
    async def invalid_mode_handler(request: Request, exc: InvalidOptimizationModeError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(UnknownBackendError)
    async def unknown_backend_handler(request: Request, exc: UnknownBackendError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


app = create_app()


# Request/Response Models

class RouteRequest(BaseModel):
    """A request to route."""
    text: str = Field(..., description="Request text")
    mode: str = Field(..., description="cost_first, performance_first or smart_balance")


class ClassifyRequest(BaseModel):
    """A request to classify."""
    text: str


class HealthUpdate(BaseModel):
    """Manual health override."""
    health: BackendHealth

    @field_validator("health", mode="before")
    @classmethod
    def parse_health(cls, v: Any) -> BackendHealth:
        return BackendHealth.parse(v)


def get_engine() -> RoutingEngine:
    """Get the routing engine instance."""
    if engine is None:
        raise HTTPException(status_code=503, detail="Routing engine not initialized")
    return engine


def get_usage_report() -> UsageReport:
    """Get the usage report instance."""
    if usage_report is None:
        raise HTTPException(status_code=503, detail="Usage report not initialized")
    return usage_report


# Routes

@app.get("/")
async def root() -> dict[str, str]:
    """API information endpoint."""
    return {
        "name": "Router Pro API",
        "version": __version__,
        "description": "Intelligent routing for multi-LLM applications",
    }


@app.get("/health")
async def health_check(
    router: RoutingEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Health check endpoint."""
    backends = router.registry.list_backends()
    available = [b.id for b in backends if b.is_available]
    return {
        "status": "healthy" if len(available) == len(backends) else (
            "degraded" if available else "unavailable"
        ),
        "backends": {b.id: b.health.value for b in backends},
        "health_checks": health_monitor is not None and health_monitor.running,
    }


@app.get("/backends")
async def list_backends(
    router: RoutingEngine = Depends(get_engine),
) -> list[dict[str, Any]]:
    """List configured backends."""
    return [b.to_dict() for b in router.registry.list_backends()]


@app.put("/backends/{backend_id}/health")
async def set_backend_health(
    backend_id: str,
    update: HealthUpdate,
    router: RoutingEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Override a backend's health."""
    backend = router.registry.set_health(backend_id, update.health)
    if health_probe is not None:
        # Keep the periodic probe from reverting the override.
        health_probe.set_offline(backend_id, not backend.is_available)
    return backend.to_dict()


@app.post("/route")
async def route_request(
    request: RouteRequest,
    router: RoutingEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Route a request and return the decision."""
    bind_routing_context(request_id=f"req-{uuid.uuid4().hex[:16]}", mode=request.mode)
    decision = router.route(request.text, request.mode)
    return decision.to_dict()


@app.post("/classify")
async def classify_request(
    request: ClassifyRequest,
    router: RoutingEngine = Depends(get_engine),
) -> dict[str, str]:
    """Classify request text."""
    return {"category": router.classify(request.text).value}


@app.get("/stats")
async def get_stats(
    report: UsageReport = Depends(get_usage_report),
) -> dict[str, Any]:
    """Running totals of routed traffic."""
    return report.summary()


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """Run the API server."""
    import uvicorn
    uvicorn.run(
        "routerpro.api.server:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
