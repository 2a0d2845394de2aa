"""Health endpoint."""

from fastapi import APIRouter, Depends

from backend.services.registry import TreeRegistry, get_registry

router = APIRouter(tags=["monitoring"])


@router.get("/health", summary="Health check")
def health(registry: TreeRegistry = Depends(get_registry)):
    """
    Health check for load balancers and orchestration.
    Reports workspace size. Does not require authentication.
    """
    trees = registry.entries()
    return {
        "status": "healthy",
        "checks": {
            "workspace": {
                "status": "up",
                "trees": len(trees),
                "nodes": sum(len(t.store) for t in trees),
            },
        },
    }
