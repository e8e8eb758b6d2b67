"""
Routing module for Router Pro.

Classifies requests, selects a backend by optimization mode, fails over
around unavailable backends, and annotates the decision with cost data.
"""

from routerpro.routing.classifier import (
    Classifier,
    ClassificationRule,
    ClassificationResult,
    KeywordClassifier,
)
from routerpro.routing.registry import BackendRegistry, CatalogSnapshot
from routerpro.routing.failover import FailoverResolver
from routerpro.routing.policy import PolicyEngine, PolicyTable
from routerpro.routing.accounting import DecisionAccountant
from routerpro.routing.engine import RoutingEngine, create_engine

__all__ = [
    "Classifier",
    "ClassificationRule",
    "ClassificationResult",
    "KeywordClassifier",
    "BackendRegistry",
    "CatalogSnapshot",
    "FailoverResolver",
    "PolicyEngine",
    "PolicyTable",
    "DecisionAccountant",
    "RoutingEngine",
    "create_engine",
]
