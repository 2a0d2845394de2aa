"""
Branchwise FastAPI application entrypoint.

Run with: uvicorn backend.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from backend import config
from backend.auth import (
    RateLimitExceeded,
    check_rate_limit,
    client_id,
    extract_api_key,
    skip_auth_path,
)
from backend.errors import TreeError
from backend.routes import api_router
from backend.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    configure_logging()
    logger.info("Branchwise started (auth %s)", "enabled" if config.API_KEY else "disabled")
    yield


app = FastAPI(
    title="Branchwise API",
    description="""Decision tree editor backend: build trees of Decision, Chance and End
nodes and read back expected values for Chance nodes.

## Authentication
When `BRANCHWISE_API_KEY` is set, include it in requests:
- **Header:** `X-API-Key: your-key`
- **Query:** `?api_key=your-key`
- **Bearer:** `Authorization: Bearer your-key`

`/api/health` does not require a key.
""",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for local React dev (Vite default port 5173)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AuthAndRateLimitMiddleware(BaseHTTPMiddleware):
    """Optional API key auth and rate limiting for /api/*."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith("/api/"):
            return await call_next(request)
        key = extract_api_key(request)
        try:
            check_rate_limit(client_id(request, key))
        except RateLimitExceeded:
            return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded."})
        if config.API_KEY and not skip_auth_path(path):
            if not key:
                return JSONResponse(status_code=401, content={"detail": "Missing API key. Provide X-API-Key or api_key."})
            if key != config.API_KEY:
                return JSONResponse(status_code=403, content={"detail": "Invalid API key."})
        return await call_next(request)


app.add_middleware(AuthAndRateLimitMiddleware)


@app.exception_handler(TreeError)
async def tree_error_handler(request: Request, exc: TreeError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "node_id": exc.node_id},
    )


@app.exception_handler(ValidationError)
async def field_validation_error_handler(request: Request, exc: ValidationError):
    """Node field bodies are validated per kind inside the routes, not by FastAPI."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False, include_input=False)},
    )


app.include_router(api_router)


@app.get("/")
def root():
    return {"service": "Branchwise", "docs": "/docs", "api": "/api"}
