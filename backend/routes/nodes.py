"""
Node routes: the mutation and query surface the tree editor calls.

Selection is owned by the editor; every request names the node it acts on.
Field bodies are plain objects; only the keys that apply to the node kind
are validated, the rest are ignored.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from backend.services.registry import TreeRegistry, get_registry
from shared.schemas import KIND_FIELDS, NodeFields, NodeKind, NodeView

router = APIRouter()


class NodeCreate(BaseModel):
    kind: NodeKind = Field(..., description="Decision, Chance or End")
    parent_id: Optional[str] = Field(None, description="Parent node; omit to add a root")
    fields: Optional[dict[str, Any]] = Field(None, description="Initial scalar fields")


@router.get("/{tree_id}/nodes", response_model=list[NodeView])
def list_nodes(tree_id: str, registry: TreeRegistry = Depends(get_registry)):
    """All nodes in pre-order (for selection lists)."""
    return registry.get(tree_id).store.flatten()


@router.post("/{tree_id}/nodes", response_model=NodeView, status_code=201)
def create_node(tree_id: str, body: NodeCreate, registry: TreeRegistry = Depends(get_registry)):
    """Add a node under `parent_id`, or as a new root."""
    store = registry.get(tree_id).store
    fields = None
    if body.fields:
        relevant = KIND_FIELDS[body.kind]
        # Validate before creating so a bad body leaves no half-initialized node.
        fields = NodeFields.model_validate({k: v for k, v in body.fields.items() if k in relevant})
    node_id = store.create_node(body.parent_id, body.kind)
    if fields is not None:
        return store.update_node(node_id, fields)
    return store.get(node_id)


@router.get("/{tree_id}/nodes/{node_id}", response_model=NodeView)
def get_node(tree_id: str, node_id: str, registry: TreeRegistry = Depends(get_registry)):
    return registry.get(tree_id).store.get(node_id)


@router.patch("/{tree_id}/nodes/{node_id}", response_model=NodeView)
def update_node(
    tree_id: str,
    node_id: str,
    fields: dict[str, Any] = Body(...),
    registry: TreeRegistry = Depends(get_registry),
):
    """Update scalar fields; fields that do not apply to the node kind are ignored."""
    return registry.get(tree_id).store.update_node(node_id, fields)


@router.delete("/{tree_id}/nodes/{node_id}", status_code=204)
def remove_node(tree_id: str, node_id: str, registry: TreeRegistry = Depends(get_registry)):
    """Remove a node with its subtree. Unknown ids succeed without changes."""
    registry.get(tree_id).store.remove_node(node_id)
    return None


@router.get("/{tree_id}/nodes/{node_id}/expected-value")
def get_expected_value(tree_id: str, node_id: str, registry: TreeRegistry = Depends(get_registry)):
    """Expected value of a node (0 unless it is a Chance node with End outcomes)."""
    entry = registry.get(tree_id)
    node = entry.store.get(node_id)
    return {
        "node_id": node.id,
        "kind": node.kind,
        "expected_value": entry.engine.expected_value(node.id),
        "probability_total": entry.engine.probability_total(node.id),
    }


@router.get("/{tree_id}/expected-values")
def get_expected_values(tree_id: str, registry: TreeRegistry = Depends(get_registry)):
    """Expected value of every Chance node, keyed by node id."""
    entry = registry.get(tree_id)
    return {"tree_id": tree_id, "version": entry.store.version, "values": entry.engine.expected_values()}
