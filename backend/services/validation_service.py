"""
Advisory tree validation.

Reports branches a user probably wants to fix before relying on the expected
values: Chance nodes without outcomes, outcome probabilities that do not add
up to 100, probabilities outside 0-100, and Decision nodes with no options.
Nothing here mutates the store or raises; probability sums that miss 100 are
allowed by the model and only reported as warnings.
"""

import logging
import math
import time
from typing import Optional

from backend.models.decision_tree import ValidationIssue
from backend.services.evaluation_service import bounded_sum
from backend.services.node_store import NodeStore
from backend.utils.logging import log_validation_result
from shared.schemas import NodeKind, NodeView

logger = logging.getLogger(__name__)

PROBABILITY_TOTAL = 100.0
PROBABILITY_TOLERANCE = 1e-6


def _check_chance(node: NodeView, children: list[NodeView]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    ends = [c for c in children if c.kind == NodeKind.END]
    if not ends:
        issues.append(
            ValidationIssue(
                code="empty_chance",
                message=f"Chance node '{node.id}' has no End outcomes; its expected value is 0",
                node_id=node.id,
            )
        )
        return issues
    total = bounded_sum(c.probability_percent for c in ends)
    if not math.isclose(total, PROBABILITY_TOTAL, abs_tol=PROBABILITY_TOLERANCE):
        issues.append(
            ValidationIssue(
                code="probability_sum",
                message=f"Outcome probabilities under '{node.id}' sum to {total:g}%, not 100%",
                node_id=node.id,
            )
        )
    return issues


def _check_end(node: NodeView) -> list[ValidationIssue]:
    if 0.0 <= node.probability_percent <= PROBABILITY_TOTAL:
        return []
    return [
        ValidationIssue(
            code="probability_range",
            message=f"End node '{node.id}' has probability {node.probability_percent:g}% outside 0-100",
            severity="error",
            node_id=node.id,
        )
    ]


def validate_tree(store: NodeStore, tree_id: Optional[str] = None) -> list[ValidationIssue]:
    """
    Walk the forest in pre-order and collect issues:
    empty_chance, probability_sum, probability_range, empty_decision.
    """
    start = time.perf_counter()
    issues: list[ValidationIssue] = []
    with store.lock:
        nodes = store.flatten()
        by_id = {n.id: n for n in nodes}
        for node in nodes:
            if node.kind == NodeKind.CHANCE:
                issues.extend(_check_chance(node, [by_id[c] for c in node.children]))
            elif node.kind == NodeKind.END:
                issues.extend(_check_end(node))
            elif not node.children:
                issues.append(
                    ValidationIssue(
                        code="empty_decision",
                        message=f"Decision node '{node.id}' has no options",
                        node_id=node.id,
                    )
                )

    errors = sum(1 for i in issues if i.severity == "error")
    log_validation_result(
        logger,
        tree_id or "-",
        warnings=len(issues) - errors,
        errors=errors,
        duration_sec=round(time.perf_counter() - start, 6),
    )
    return issues
