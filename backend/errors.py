"""
Domain errors for the node store and tree registry.

Routes translate these into HTTP responses (see backend.main); services raise
them directly and never retry.
"""

from typing import Optional


class TreeError(Exception):
    """Base class for tree errors. `code` is stable and safe to show to clients."""

    code = "tree_error"
    status_code = 400

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.node_id = node_id


class NodeNotFoundError(TreeError):
    """An operation referenced a node id that is not in the forest."""

    code = "not_found"
    status_code = 404


class InvalidOperationError(TreeError):
    """A structural rule would be broken (e.g. attaching a child to an End node)."""

    code = "invalid_operation"
    status_code = 409


class TreeNotFoundError(TreeError):
    """No tree with this id in the workspace registry."""

    code = "tree_not_found"
    status_code = 404
