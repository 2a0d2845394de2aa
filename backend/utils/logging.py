"""
Structured logging for Branchwise.

- Configurable level (DEBUG, INFO, WARNING, ERROR)
- Writes to the logs/ directory (single file handler)
- Console handler for development
- Helpers for tree mutations and validation results
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from backend.config import LOG_DIR, LOG_LEVEL

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def configure_logging(
    level: str = LOG_LEVEL,
    log_dir: Optional[Path] = None,
    log_to_console: bool = True,
) -> None:
    """Configure root and backend loggers. Call once at app startup."""
    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    level_value = getattr(logging, level.upper(), logging.INFO)

    file_handler = logging.FileHandler(log_dir / "branchwise.log", encoding="utf-8")
    file_handler.setLevel(level_value)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root = logging.getLogger()
    root.setLevel(level_value)
    # Avoid duplicate handlers when reloading
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(file_handler)
    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level_value)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(console)

    logging.getLogger("backend").setLevel(level_value)


def _ts() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def log_tree_mutation(
    logger: logging.Logger,
    action: str,
    node_id: Optional[str] = None,
    kind: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Log a store mutation (create, update, remove, load) at DEBUG level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    payload = {
        "event": "tree_mutation",
        "action": action,
        "node_id": node_id,
        "kind": kind,
        "ts": _ts(),
    }
    if extra:
        payload.update(extra)
    logger.debug("Mutation: %s", json.dumps(payload, default=str))


def log_validation_result(
    logger: logging.Logger,
    tree_id: str,
    warnings: int,
    errors: int,
    duration_sec: Optional[float] = None,
) -> None:
    """Log validation run result. Escalates to WARNING when errors were found."""
    payload = {
        "event": "validation",
        "tree_id": tree_id,
        "warnings": warnings,
        "errors": errors,
        "duration_sec": duration_sec,
        "ts": _ts(),
    }
    level = logging.WARNING if errors else logging.INFO
    logger.log(level, "Validation: %s", json.dumps(payload, default=str))
