"""
Workspace routes: create, list, fetch and delete trees; nested forest
projection; advisory validation.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.services.registry import TreeRegistry, get_registry
from backend.services.validation_service import validate_tree
from shared.schemas import ForestNode

router = APIRouter()


class TreeCreate(BaseModel):
    name: str = Field("Untitled tree", description="Human-readable name")
    id: Optional[str] = Field(None, description="Tree ID; generated when omitted")


@router.get("/", response_model=list[dict])
def list_trees(registry: TreeRegistry = Depends(get_registry)):
    """List trees in the workspace, oldest first."""
    return [entry.summary() for entry in registry.entries()]


@router.post("/", status_code=201)
def create_tree(body: TreeCreate, registry: TreeRegistry = Depends(get_registry)):
    """Create an empty tree."""
    return registry.create(body.name, body.id).summary()


@router.get("/{tree_id}")
def get_tree(tree_id: str, registry: TreeRegistry = Depends(get_registry)):
    """Tree summary plus the nested forest."""
    entry = registry.get(tree_id)
    return {**entry.summary(), "forest": [f.model_dump(mode="json") for f in entry.store.to_forest()]}


@router.delete("/{tree_id}", status_code=204)
def delete_tree(tree_id: str, registry: TreeRegistry = Depends(get_registry)):
    registry.delete(tree_id)
    return None


@router.get("/{tree_id}/forest", response_model=list[ForestNode])
def get_forest(tree_id: str, registry: TreeRegistry = Depends(get_registry)):
    """Read-only nested projection of the forest, the shape the editor renders."""
    return registry.get(tree_id).store.to_forest()


@router.put("/{tree_id}/forest")
def replace_forest(tree_id: str, forest: list[ForestNode], registry: TreeRegistry = Depends(get_registry)):
    """Replace the whole forest with nested records (e.g. an import from the editor)."""
    entry = registry.get(tree_id)
    loaded = entry.store.load_forest(forest)
    return {**entry.summary(), "loaded": loaded}


@router.get("/{tree_id}/validate")
def validate(tree_id: str, registry: TreeRegistry = Depends(get_registry)):
    """Run advisory validation. `valid` is False only when an error-level issue exists."""
    entry = registry.get(tree_id)
    issues = validate_tree(entry.store, tree_id=tree_id)
    return {
        "issues": [i.model_dump(mode="json") for i in issues],
        "valid": not any(i.severity == "error" for i in issues),
    }
