"""Shared schemas and types for Branchwise (backend and frontend contract)."""

from shared.schemas.decision_tree import (
    KIND_FIELDS,
    ForestNode,
    NodeFields,
    NodeKind,
    NodeView,
)

__all__ = [
    "KIND_FIELDS",
    "ForestNode",
    "NodeFields",
    "NodeKind",
    "NodeView",
]
