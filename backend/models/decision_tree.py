"""
Internal node records for the Branchwise node store.

The store keeps nodes in an arena (node_id -> NodeRecord) and links them by id.
Records are mutable and never leave the store; callers get NodeView snapshots
from shared.schemas instead.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from shared.schemas import KIND_FIELDS, NodeFields, NodeKind, NodeView


# -----------------------------------------------------------------------------
# NodeRecord
# -----------------------------------------------------------------------------


class NodeRecord(BaseModel):
    """
    A single node as stored in the arena.

    - id, kind and parent_id are fixed once the record is created
    - level is derived from position and written on insert
    - children: ordered ids of child records (empty for End nodes)
    """

    id: str = Field(..., description="Unique identifier for this node")
    kind: NodeKind = Field(..., description="Decision, Chance or End")
    level: int = Field(1, ge=1, description="Depth, 1 at the forest root")
    parent_id: Optional[str] = Field(None, description="Owning parent, None for roots")
    children: list[str] = Field(default_factory=list, description="Child node IDs in insertion order")

    label: str = Field("", description="Decision: free-text description of the choice")
    decision_note: str = Field("", description="Chance: free-text annotation")
    outcome: str = Field("", description="End: outcome text")
    probability_percent: float = Field(0.0, description="End: nominally 0-100, not enforced")
    payoff: float = Field(0.0, description="End: payoff")

    def apply(self, fields: NodeFields) -> list[str]:
        """Copy the fields relevant to this kind. Returns the names that were set."""
        changed = []
        for name in KIND_FIELDS[self.kind]:
            value = getattr(fields, name)
            if value is not None:
                setattr(self, name, value)
                changed.append(name)
        return changed

    def view(self) -> NodeView:
        return NodeView(
            id=self.id,
            kind=self.kind,
            level=self.level,
            parent_id=self.parent_id,
            children=tuple(self.children),
            label=self.label,
            decision_note=self.decision_note,
            outcome=self.outcome,
            probability_percent=self.probability_percent,
            payoff=self.payoff,
        )


# -----------------------------------------------------------------------------
# ValidationIssue
# -----------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """A single advisory finding about a tree."""

    code: str = Field(..., description="Issue code (e.g. probability_sum, empty_chance)")
    message: str = Field(..., description="Human-readable message")
    severity: Literal["warning", "error"] = Field("warning", description="warning or error")
    node_id: Optional[str] = Field(None, description="Relevant node ID if applicable")
