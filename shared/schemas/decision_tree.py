"""
Decision tree node schemas and Pydantic models.

Used by both backend (node store, evaluation, API) and frontend (tree editor).
Views are frozen: the store hands out snapshots, never live records.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(str, Enum):
    """Kind of node in the decision tree. Closed set, fixed at creation."""

    DECISION = "Decision"
    CHANCE = "Chance"
    END = "End"


# Scalar fields each kind carries; everything else is ignored on update.
KIND_FIELDS: dict[NodeKind, tuple[str, ...]] = {
    NodeKind.DECISION: ("label",),
    NodeKind.CHANCE: ("decision_note",),
    NodeKind.END: ("outcome", "probability_percent", "payoff"),
}


class NodeFields(BaseModel):
    """Partial set of scalar fields for an update. Unset fields are left alone."""

    label: Optional[str] = Field(None, description="Decision: description of the choice")
    decision_note: Optional[str] = Field(None, description="Chance: free-text annotation")
    outcome: Optional[str] = Field(None, description="End: outcome text")
    probability_percent: Optional[float] = Field(
        None,
        description="End: probability as a percentage of the parent branch (not range-checked)",
    )
    payoff: Optional[float] = Field(None, description="End: payoff, any real number")

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class NodeView(BaseModel):
    """Read-only snapshot of a single node (children as ordered ids)."""

    id: str = Field(..., description="Unique node ID")
    kind: NodeKind = Field(..., description="Node kind")
    level: int = Field(..., ge=1, description="Depth in the forest, 1 for roots")
    parent_id: Optional[str] = Field(None, description="Owning parent, None for roots")
    children: tuple[str, ...] = Field(default=(), description="Child node IDs in display order")

    label: str = ""
    decision_note: str = ""
    outcome: str = ""
    probability_percent: float = 0.0
    payoff: float = 0.0

    model_config = ConfigDict(frozen=True)


class ForestNode(BaseModel):
    """Nested record of a node and its subtree, the shape the UI renders."""

    id: str = Field(..., description="Unique node ID")
    kind: NodeKind = Field(..., description="Node kind")
    level: Optional[int] = Field(
        None,
        ge=1,
        description="Depth in the forest, 1 for roots; optional on input, checked against position",
    )

    label: str = ""
    decision_note: str = ""
    outcome: str = ""
    probability_percent: float = 0.0
    payoff: float = 0.0

    children: list["ForestNode"] = Field(default_factory=list, description="Child nodes")

    model_config = ConfigDict(allow_inf_nan=False)
