"""Utility modules for Router Pro."""

from routerpro.utils.logging import bind_routing_context, setup_logging

__all__ = [
    "bind_routing_context",
    "setup_logging",
]
