"""
In-memory workspace of decision trees.

Each tree gets its own NodeStore and EvaluationEngine. Nothing is written to
disk; the registry lives as long as the process.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from backend.errors import InvalidOperationError, TreeNotFoundError
from backend.services.evaluation_service import EvaluationEngine
from backend.services.node_store import NodeStore

logger = logging.getLogger(__name__)


class TreeEntry:
    """A named tree in the workspace."""

    __slots__ = ("id", "name", "created_at", "store", "engine")

    def __init__(self, tree_id: str, name: str):
        self.id = tree_id
        self.name = name
        self.created_at = datetime.now(timezone.utc)
        self.store = NodeStore()
        self.engine = EvaluationEngine(self.store)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "node_count": len(self.store),
            "version": self.store.version,
            "created_at": self.created_at.isoformat(),
        }


class TreeRegistry:
    """Map of tree id -> TreeEntry, safe to share across request threads."""

    def __init__(self) -> None:
        self._trees: dict[str, TreeEntry] = {}
        self._lock = threading.Lock()

    def create(self, name: str, tree_id: Optional[str] = None) -> TreeEntry:
        tree_id = tree_id or f"tree-{uuid.uuid4().hex[:12]}"
        with self._lock:
            if tree_id in self._trees:
                raise InvalidOperationError(f"Tree '{tree_id}' already exists")
            entry = TreeEntry(tree_id, name)
            self._trees[tree_id] = entry
        logger.info("Created tree id=%s name=%s", tree_id, name)
        return entry

    def get(self, tree_id: str) -> TreeEntry:
        with self._lock:
            entry = self._trees.get(tree_id)
        if entry is None:
            raise TreeNotFoundError(f"Tree '{tree_id}' not found")
        return entry

    def entries(self) -> list[TreeEntry]:
        with self._lock:
            return list(self._trees.values())

    def delete(self, tree_id: str) -> None:
        with self._lock:
            if self._trees.pop(tree_id, None) is None:
                raise TreeNotFoundError(f"Tree '{tree_id}' not found")
        logger.info("Deleted tree id=%s", tree_id)


_registry = TreeRegistry()


def get_registry() -> TreeRegistry:
    """Dependency: the process-wide tree registry."""
    return _registry
