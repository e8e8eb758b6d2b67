"""
Analytics module for Router Pro.

Aggregates routing decisions into request counts, spend and projected
savings.
"""

from routerpro.analytics.reporting import (
    ReportingSink,
    DecisionTotals,
    UsageReport,
    SavingsProjection,
    project_savings,
    DEFAULT_MODE_UNIT_COSTS,
)

__all__ = [
    "ReportingSink",
    "DecisionTotals",
    "UsageReport",
    "SavingsProjection",
    "project_savings",
    "DEFAULT_MODE_UNIT_COSTS",
]
