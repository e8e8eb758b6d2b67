"""Health monitoring for routing backends."""

from routerpro.health.monitor import HealthMonitor, HealthProbe, StaticHealthProbe

__all__ = [
    "HealthMonitor",
    "HealthProbe",
    "StaticHealthProbe",
]
