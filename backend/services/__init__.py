"""Backend services (node store, evaluation, validation, workspace)."""

from backend.services.node_store import NodeStore
from backend.services.evaluation_service import EvaluationEngine, weighted_payoff
from backend.services.validation_service import validate_tree
from backend.services.registry import TreeEntry, TreeRegistry, get_registry

__all__ = [
    "NodeStore",
    "EvaluationEngine",
    "weighted_payoff",
    "validate_tree",
    "TreeEntry",
    "TreeRegistry",
    "get_registry",
]
