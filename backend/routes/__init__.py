"""API routes for Branchwise backend."""

from fastapi import APIRouter

from backend.routes import monitoring, nodes, trees

api_router = APIRouter(prefix="/api", tags=["api"])

api_router.include_router(monitoring.router)
api_router.include_router(trees.router, prefix="/trees", tags=["trees"])
api_router.include_router(nodes.router, prefix="/trees", tags=["nodes"])
