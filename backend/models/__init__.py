"""
Branchwise core data models.

Internal arena records for the node store and validation findings. For the
API/JSON contract with the frontend, see shared.schemas.
"""

from backend.models.decision_tree import NodeRecord, ValidationIssue

__all__ = [
    "NodeRecord",
    "ValidationIssue",
]
