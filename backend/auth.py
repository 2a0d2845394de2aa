"""
Optional API key check and in-memory rate limiting for /api/*.

- If BRANCHWISE_API_KEY is set, requests must send it as X-API-Key, ?api_key=,
  or Authorization: Bearer <key>.
- /api/health is always open.
- Rate limit: fixed window per API key or client IP.
"""

import threading
import time
from typing import Optional

from fastapi import Request

from backend import config

OPEN_PATHS = ("/api/health",)

# client id -> (window_start_sec, count)
_rate_limit_store: dict[str, tuple[float, int]] = {}
_rate_limit_lock = threading.Lock()


class RateLimitExceeded(Exception):
    pass


def skip_auth_path(path: str) -> bool:
    return path.rstrip("/") in OPEN_PATHS


def extract_api_key(request: Request) -> Optional[str]:
    """API key from header, query string, or Bearer token (in that order)."""
    key = request.headers.get(config.API_KEY_HEADER) or request.query_params.get("api_key")
    if key:
        return key
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[len("Bearer "):]
    return None


def client_id(request: Request, api_key: Optional[str]) -> str:
    """Identify client for rate limiting: API key if present, else forwarded IP or client host."""
    if api_key:
        return f"key:{api_key[:16]}"
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


def check_rate_limit(
    cid: str,
    limit: Optional[int] = None,
    window_sec: Optional[int] = None,
    now: Optional[float] = None,
) -> None:
    """Count one request for `cid`; raise RateLimitExceeded when over the limit."""
    limit = config.RATE_LIMIT_REQUESTS if limit is None else limit
    window_sec = config.RATE_LIMIT_WINDOW_SEC if window_sec is None else window_sec
    if limit <= 0:
        return
    now = time.time() if now is None else now
    with _rate_limit_lock:
        start, count = _rate_limit_store.get(cid, (now, 0))
        if now - start >= window_sec:
            start, count = now, 0
        count += 1
        _rate_limit_store[cid] = (start, count)
    if count > limit:
        raise RateLimitExceeded(cid)


def reset_rate_limits() -> None:
    with _rate_limit_lock:
        _rate_limit_store.clear()
