"""
Rich CLI interface for Router Pro.

Route prompts, inspect backends, and project savings from the terminal.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from routerpro import __version__
from routerpro.analytics.reporting import project_savings
from routerpro.core.config import get_settings
from routerpro.core.errors import (
    InvalidOptimizationModeError,
    InvocationError,
    NoBackendAvailableError,
    UnknownBackendError,
)
from routerpro.core.models import BackendHealth, OptimizationMode, RoutingDecision
from routerpro.execution.executor import SimulatedExecutor, dispatch
from routerpro.routing.engine import RoutingEngine, create_engine
from routerpro.utils.logging import bind_routing_context, setup_logging

app = typer.Typer(
    name="routerpro",
    help="Router Pro - intelligent routing for multi-LLM applications",
    no_args_is_help=True,
)
console = Console()

MODE_HELP = "Optimization mode: cost_first, performance_first, smart_balance"


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log routing decisions to stderr"),
):
    # Quiet by default so logs do not interleave with rendered output.
    setup_logging(level="DEBUG" if verbose else "WARNING", json_format=False)


def get_engine(offline: list[str] | None = None) -> RoutingEngine:
    """Build an engine, marking the given backends offline."""
    engine = create_engine()
    for backend_id in offline or []:
        try:
            engine.registry.set_health(backend_id, BackendHealth.UNAVAILABLE)
        except UnknownBackendError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    return engine


def parse_mode(mode: str) -> OptimizationMode:
    try:
        return OptimizationMode.parse(mode)
    except InvalidOptimizationModeError as e:
        console.print(f"[red]{e}[/red]")
        console.print(f"Valid modes: {', '.join(m.value for m in OptimizationMode)}")
        raise typer.Exit(1)


def render_decision(decision: RoutingDecision) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Backend", f"[cyan]{decision.backend_name}[/cyan] ({decision.backend_id})")
    table.add_row("Category", decision.task_category.label)
    table.add_row("Mode", decision.optimization_mode.label)
    table.add_row("Reason", decision.reason)
    table.add_row("Est. cost", f"${decision.estimated_cost:.4f}")
    table.add_row("Est. latency", f"{decision.estimated_latency_ms}ms")
    table.add_row("Quality", f"{decision.quality_score:g}/100")

    if decision.failed_over:
        return Panel(table, title="[bold yellow]Routed (failover)[/bold yellow]", border_style="yellow")
    return Panel(table, title="[bold green]Routed[/bold green]", border_style="green")


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold cyan]Router Pro[/bold cyan] v{__version__}")


@app.command()
def backends(
    offline: Optional[list[str]] = typer.Option(None, "--offline", "-o", help="Mark backend offline"),
):
    """List configured backends and their health."""
    engine = get_engine(offline)

    table = Table(title="Backends", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Cost", justify="right")
    table.add_column("Latency", justify="right")
    table.add_column("Quality", justify="right")
    table.add_column("Fallback", style="blue")
    table.add_column("Status")

    for backend in engine.registry.list_backends():
        status = "[green]online[/green]" if backend.is_available else "[red]offline[/red]"
        table.add_row(
            backend.id,
            backend.display_name,
            f"${backend.unit_cost:.4f}",
            f"{backend.latency_estimate_ms}ms",
            f"{backend.quality_score:g}",
            backend.fallback or "-",
            status,
        )

    console.print(table)

    tiers = Table(title="Tiers", show_header=True)
    tiers.add_column("Tier", style="cyan")
    tiers.add_column("Backend", style="green")
    for tier, backend_id in engine.table.tiers.items():
        tiers.add_row(tier, backend_id)
    console.print(tiers)


@app.command()
def classify(
    text: str = typer.Argument(..., help="Request text to classify"),
):
    """Show the task category for a request."""
    engine = create_engine()
    category = engine.classify(text)
    console.print(f"[bold]Category:[/bold] [cyan]{category.label}[/cyan]")


@app.command()
def route(
    text: str = typer.Argument(..., help="The request to route"),
    mode: str = typer.Option("smart_balance", "--mode", "-m", help=MODE_HELP),
    offline: Optional[list[str]] = typer.Option(None, "--offline", "-o", help="Mark backend offline"),
):
    """Show which backend a request would be routed to."""
    optimization_mode = parse_mode(mode)
    bind_routing_context(command="route", mode=optimization_mode)
    engine = get_engine(offline)

    try:
        decision = engine.route(text, optimization_mode)
    except NoBackendAvailableError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(render_decision(decision))


@app.command()
def ask(
    text: str = typer.Argument(..., help="The request to send"),
    mode: str = typer.Option("smart_balance", "--mode", "-m", help=MODE_HELP),
    offline: Optional[list[str]] = typer.Option(None, "--offline", "-o", help="Mark backend offline"),
):
    """Route a request and invoke the chosen backend (simulated)."""
    settings = get_settings()
    optimization_mode = parse_mode(mode)
    bind_routing_context(command="ask", mode=optimization_mode)
    engine = get_engine(offline)
    executor = SimulatedExecutor(delay_ms=settings.router.simulated_latency_ms)

    async def run():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Routing request...", total=None)
            return await dispatch(
                engine,
                executor,
                text,
                optimization_mode,
                timeout=settings.router.invocation_timeout_seconds,
            )

    try:
        decision, result = asyncio.run(run())
    except (NoBackendAvailableError, InvocationError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(render_decision(decision))
    console.print(Panel(
        result.content,
        title=f"[bold cyan]{decision.backend_name}[/bold cyan]",
        subtitle=f"[dim]{result.latency_ms:.0f}ms[/dim]",
    ))


@app.command()
def savings(
    requests: Optional[int] = typer.Option(None, "--requests", "-n", help="Monthly request volume"),
):
    """Project monthly savings for each optimization mode."""
    settings = get_settings()
    monthly = requests if requests is not None else settings.router.monthly_requests
    projection = project_savings(
        monthly_requests=monthly,
        baseline_unit_cost=settings.router.baseline_unit_cost,
    )

    table = Table(title=f"Projected cost for {monthly:,} requests/month", show_header=True)
    table.add_column("Mode", style="cyan")
    table.add_column("Without router", justify="right")
    table.add_column("With router", justify="right")
    table.add_column("Savings", justify="right", style="green")

    for mode, cost in projection.mode_costs.items():
        table.add_row(
            mode.label,
            f"${projection.baseline_cost:,.2f}",
            f"${cost:,.2f}",
            f"${projection.savings[mode]:,.2f}",
        )

    console.print(table)


@app.command()
def config():
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="Router Pro Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug", str(settings.debug))
    table.add_row("Log Level", settings.router.log_level)
    table.add_row("Backends File", str(settings.router.backends_file or "(built-in)"))
    table.add_row("Health Checks", str(settings.router.health_check_enabled))
    table.add_row("Health Interval", f"{settings.router.health_check_interval_seconds}s")
    table.add_row("Invocation Timeout", f"{settings.router.invocation_timeout_seconds}s")
    table.add_row("Baseline Unit Cost", f"${settings.router.baseline_unit_cost:.4f}")
    table.add_row("Server Host", settings.server.host)
    table.add_row("Server Port", str(settings.server.port))

    console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: Optional[bool] = typer.Option(None, "--reload/--no-reload", help="Enable auto-reload"),
):
    """Start the API server (defaults come from ROUTERPRO_SERVER_* settings)."""
    from routerpro.api.server import run_server

    server = get_settings().server
    host = host if host is not None else server.host
    port = port if port is not None else server.port
    reload = reload if reload is not None else server.reload

    console.print(Panel(
        f"Starting Router Pro API server\n"
        f"Host: [cyan]{host}[/cyan]\n"
        f"Port: [cyan]{port}[/cyan]\n"
        f"Docs: [link]http://{host}:{port}/docs[/link]",
        title="Router Pro Server",
    ))

    run_server(host=host, port=port, reload=reload)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
