#!/usr/bin/env python3
"""
Basic usage examples for Router Pro.

This file demonstrates routing decisions, failover, running totals,
and simulated invocation.
"""

import asyncio

from routerpro import BackendHealth, NoBackendAvailableError, create_engine
from routerpro.analytics import UsageReport, project_savings
from routerpro.execution import SimulatedExecutor, dispatch


def simple_routing():
    """Route the same request under each optimization mode."""
    print("\n=== Simple Routing ===\n")

    engine = create_engine()

    for mode in ("cost_first", "performance_first", "smart_balance"):
        decision = engine.route("Debug my Python function", mode)
        print(f"{mode:>18}: {decision.backend_name} ({decision.reason})")
        print(f"{'':>18}  ${decision.estimated_cost:.4f}, {decision.estimated_latency_ms}ms")


def failover():
    """Route around an offline backend."""
    print("\n=== Failover ===\n")

    engine = create_engine()
    engine.registry.set_health("gpt4", BackendHealth.UNAVAILABLE)

    decision = engine.route("Write a creative story", "performance_first")
    print(f"Backend: {decision.backend_name}")
    print(f"Reason: {decision.reason}")

    for backend in engine.registry.list_backends():
        engine.registry.set_health(backend.id, BackendHealth.UNAVAILABLE)

    try:
        engine.route("Write a creative story", "performance_first")
    except NoBackendAvailableError as e:
        print(f"All offline: tried {', '.join(e.tried)}")


def running_totals():
    """Collect decisions in a usage report."""
    print("\n=== Running Totals ===\n")

    report = UsageReport()
    engine = create_engine(sinks=[report])

    for text in ("What is React?", "Analyze quarterly churn", "Write a poem", "Fix this bug"):
        engine.route(text, "smart_balance")

    summary = report.summary()
    print(f"Requests: {summary['total_requests']}")
    print(f"Total cost: ${summary['total_cost']:.4f}")
    print(f"Savings vs baseline: ${summary['savings']:.4f}")

    projection = project_savings()
    for mode, saved in projection.savings.items():
        print(f"Projected monthly savings ({mode.label}): ${saved:,.2f}")


async def simulated_invocation():
    """Route a request and invoke the chosen backend."""
    print("\n=== Simulated Invocation ===\n")

    engine = create_engine()
    decision, result = await dispatch(
        engine,
        SimulatedExecutor(delay_ms=200),
        "Analyze our sales data",
        "smart_balance",
    )
    print(f"{decision.backend_name}: {result.content}")
    print(f"Latency: {result.latency_ms:.0f}ms")


def main():
    """Run all examples."""
    simple_routing()
    failover()
    running_totals()
    asyncio.run(simulated_invocation())


if __name__ == "__main__":
    main()
