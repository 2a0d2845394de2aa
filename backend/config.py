"""
Runtime configuration for Branchwise, read once from the environment.

  BRANCHWISE_LOG_LEVEL                DEBUG | INFO | WARNING | ERROR (default: INFO)
  BRANCHWISE_LOG_DIR                  directory for branchwise.log (default: <project>/logs)
  BRANCHWISE_API_KEY                  when set, /api/* requires this key
  BRANCHWISE_RATE_LIMIT_REQUESTS      requests per window per client, 0 disables (default: 120)
  BRANCHWISE_RATE_LIMIT_WINDOW_SEC    window length in seconds (default: 60)
  BRANCHWISE_CORS_ORIGINS             comma-separated origins (default: Vite dev server)
"""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


LOG_LEVEL = _env("BRANCHWISE_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(_env("BRANCHWISE_LOG_DIR") or PROJECT_ROOT / "logs")

API_KEY = _env("BRANCHWISE_API_KEY")
API_KEY_HEADER = "X-API-Key"
RATE_LIMIT_REQUESTS = int(_env("BRANCHWISE_RATE_LIMIT_REQUESTS", "120"))
RATE_LIMIT_WINDOW_SEC = int(_env("BRANCHWISE_RATE_LIMIT_WINDOW_SEC", "60"))

CORS_ORIGINS = [
    o.strip()
    for o in _env("BRANCHWISE_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if o.strip()
]
