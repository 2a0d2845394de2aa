"""
Node store: owns the forest of Decision/Chance/End nodes.

Nodes live in an arena (node_id -> NodeRecord) with an ordered list of root
ids; each record lists its children by id. Every mutation runs under one
re-entrant lock, so there is a single writer at a time and readers see the
tree either before or after a mutation, never halfway through it.

- create_node: append a new root or child with a fresh id
- update_node: set the scalar fields that apply to the node's kind
- remove_node: drop a node and its whole subtree (no-op for missing ids)
- find / flatten / children / roots: read-only snapshots
- to_forest / load_forest: nested record projection for the UI
"""

import logging
import re
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from backend.errors import InvalidOperationError, NodeNotFoundError
from backend.models.decision_tree import NodeRecord
from backend.utils.logging import log_tree_mutation
from shared.schemas import KIND_FIELDS, ForestNode, NodeFields, NodeKind, NodeView

logger = logging.getLogger(__name__)

ID_PREFIX = "node-"
ID_PATTERN = re.compile(rf"^{re.escape(ID_PREFIX)}(\d+)$")


class NodeStore:
    """In-memory forest with id-addressed nodes."""

    def __init__(self) -> None:
        self._nodes: dict[str, NodeRecord] = {}
        self._roots: list[str] = []
        self._next_seq = 1
        self._version = 0
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Bumped on every successful mutation."""
        return self._version

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_node(self, parent_id: Optional[str], kind: Union[NodeKind, str]) -> str:
        """
        Create a node with neutral defaults and return its id.

        Without a parent the node becomes a new root at level 1. End nodes
        cannot take children.
        """
        kind = NodeKind(kind)
        with self._lock:
            if parent_id:
                parent = self._get(parent_id)
                if parent.kind == NodeKind.END:
                    raise InvalidOperationError(
                        f"End node '{parent_id}' cannot have children", node_id=parent_id
                    )
                level = parent.level + 1
            else:
                parent = None
                level = 1

            node_id = self._next_id()
            self._nodes[node_id] = NodeRecord(
                id=node_id,
                kind=kind,
                level=level,
                parent_id=parent.id if parent else None,
            )
            if parent is None:
                self._roots.append(node_id)
            else:
                parent.children.append(node_id)
            self._version += 1

        log_tree_mutation(logger, "create", node_id, kind.value, {"parent_id": parent_id, "level": level})
        return node_id

    def update_node(self, node_id: str, fields: Union[NodeFields, Mapping[str, Any]]) -> NodeView:
        """
        Set scalar fields on a node. Fields that do not apply to the node's
        kind are ignored without being validated; id, kind, level and
        children never change here.
        """
        with self._lock:
            record = self._get(node_id)
            if not isinstance(fields, NodeFields):
                relevant = KIND_FIELDS[record.kind]
                fields = NodeFields.model_validate({k: v for k, v in fields.items() if k in relevant})
            changed = record.apply(fields)
            if changed:
                self._version += 1
            view = record.view()

        log_tree_mutation(logger, "update", node_id, record.kind.value, {"fields": changed})
        return view

    def remove_node(self, node_id: Optional[str]) -> None:
        """Remove a node and its entire subtree. Missing or empty ids are a no-op."""
        if not node_id:
            return
        with self._lock:
            record = self._nodes.get(node_id)
            if record is None:
                logger.debug("remove_node: '%s' not in forest, nothing to do", node_id)
                return

            doomed = self._preorder([node_id])
            if record.parent_id is None:
                self._roots.remove(node_id)
            else:
                self._nodes[record.parent_id].children.remove(node_id)
            for nid in doomed:
                del self._nodes[nid]
            self._version += 1

        log_tree_mutation(logger, "remove", node_id, record.kind.value, {"removed": len(doomed)})

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, node_id: Optional[str]) -> Optional[NodeView]:
        """Snapshot of a node, or None if it does not exist."""
        if not node_id:
            return None
        with self._lock:
            record = self._nodes.get(node_id)
            return record.view() if record else None

    def get(self, node_id: str) -> NodeView:
        """Like find, but raises NodeNotFoundError."""
        with self._lock:
            return self._get(node_id).view()

    def flatten(self) -> list[NodeView]:
        """Every node in pre-order: node first, then its children in order."""
        with self._lock:
            return [self._nodes[nid].view() for nid in self._preorder(self._roots)]

    def roots(self) -> list[NodeView]:
        with self._lock:
            return [self._nodes[nid].view() for nid in self._roots]

    def children(self, node_id: str) -> list[NodeView]:
        with self._lock:
            record = self._get(node_id)
            return [self._nodes[cid].view() for cid in record.children]

    def subtree(self, node_id: str) -> list[NodeView]:
        """The node and all of its descendants, in pre-order."""
        with self._lock:
            self._get(node_id)
            return [self._nodes[nid].view() for nid in self._preorder([node_id])]

    # -------------------------------------------------------------------------
    # Nested projection
    # -------------------------------------------------------------------------

    def to_forest(self) -> list[ForestNode]:
        """Nested records of the whole forest, in display order."""
        with self._lock:
            return [self._to_forest_node(nid) for nid in self._roots]

    def load_forest(self, forest: Iterable[Union[ForestNode, Mapping[str, Any]]]) -> int:
        """
        Replace the store contents with nested records and return the number
        of nodes loaded. Ids are kept. A record may omit its level; a level
        that is given must match the record's position.

        The store is left untouched if the records are invalid.
        """
        roots = [f if isinstance(f, ForestNode) else ForestNode.model_validate(f) for f in forest]
        nodes: dict[str, NodeRecord] = {}
        root_ids: list[str] = []
        stack: list[tuple[ForestNode, Optional[NodeRecord]]] = [(r, None) for r in reversed(roots)]
        while stack:
            item, parent = stack.pop()
            if item.id in nodes:
                raise InvalidOperationError(f"Duplicate node id '{item.id}'", node_id=item.id)
            if item.kind == NodeKind.END and item.children:
                raise InvalidOperationError(f"End node '{item.id}' cannot have children", node_id=item.id)
            level = parent.level + 1 if parent else 1
            if item.level is not None and item.level != level:
                raise InvalidOperationError(
                    f"Node '{item.id}' has level {item.level}, expected {level}", node_id=item.id
                )
            record = NodeRecord(
                id=item.id,
                kind=item.kind,
                level=level,
                parent_id=parent.id if parent else None,
                label=item.label,
                decision_note=item.decision_note,
                outcome=item.outcome,
                probability_percent=item.probability_percent,
                payoff=item.payoff,
            )
            nodes[record.id] = record
            if parent is None:
                root_ids.append(record.id)
            else:
                parent.children.append(record.id)
            stack.extend((child, record) for child in reversed(item.children))

        with self._lock:
            self._nodes = nodes
            self._roots = root_ids
            self._reserve_ids(nodes)
            self._version += 1

        log_tree_mutation(logger, "load", extra={"nodes": len(nodes), "roots": len(root_ids)})
        return len(nodes)

    # -------------------------------------------------------------------------
    # Internals (callers hold the lock)
    # -------------------------------------------------------------------------

    def _get(self, node_id: str) -> NodeRecord:
        record = self._nodes.get(node_id) if node_id else None
        if record is None:
            raise NodeNotFoundError(f"Node '{node_id}' not found", node_id=node_id)
        return record

    def _next_id(self) -> str:
        while True:
            candidate = f"{ID_PREFIX}{self._next_seq}"
            self._next_seq += 1
            if candidate not in self._nodes:
                return candidate

    def _reserve_ids(self, node_ids: Iterable[str]) -> None:
        # Generated ids must stay ahead of every loaded node-<n>, live or removed later.
        for nid in node_ids:
            match = ID_PATTERN.match(nid)
            if match:
                self._next_seq = max(self._next_seq, int(match.group(1)) + 1)

    def _preorder(self, start: list[str]) -> list[str]:
        out: list[str] = []
        stack = list(reversed(start))
        while stack:
            nid = stack.pop()
            out.append(nid)
            stack.extend(reversed(self._nodes[nid].children))
        return out

    def _to_forest_node(self, node_id: str) -> ForestNode:
        record = self._nodes[node_id]
        return ForestNode(
            id=record.id,
            kind=record.kind,
            level=record.level,
            label=record.label,
            decision_note=record.decision_note,
            outcome=record.outcome,
            probability_percent=record.probability_percent,
            payoff=record.payoff,
            children=[self._to_forest_node(cid) for cid in record.children],
        )
