"""
Expected-value evaluation for Chance nodes.

A Chance node's value is the probability-weighted sum of the payoffs of its
End children: sum(payoff * probability_percent / 100). Children of other
kinds contribute nothing; Decision and End nodes evaluate to 0.

Results are memoized per node and dropped whenever the store version moves.

Overflow policy: a term or sum that exceeds the float range is clamped to
+/-sys.float_info.max (sign kept) and logged as a warning. NaN terms count
as 0. Nothing here raises.
"""

import logging
import math
import sys
from collections.abc import Iterable
from typing import Optional

from backend.services.node_store import NodeStore
from shared.schemas import NodeKind, NodeView

logger = logging.getLogger(__name__)

FLOAT_MAX = sys.float_info.max


def clamp(value: float) -> float:
    """Clamp infinities to the largest finite float of the same sign; NaN becomes 0.0."""
    if math.isnan(value):
        logger.warning("Non-numeric value in evaluation, counting it as 0")
        return 0.0
    if math.isinf(value):
        logger.warning("Value overflowed the float range, clamping to %s", "max" if value > 0 else "-max")
        return math.copysign(FLOAT_MAX, value)
    return value


def bounded_sum(values: Iterable[float]) -> float:
    """Exact float sum that clamps on overflow instead of raising."""
    terms = [clamp(v) for v in values]
    try:
        return math.fsum(terms)
    except OverflowError:
        # Terms are finite, so the running sum can reach one infinity but never NaN.
        return clamp(sum(terms))


def weighted_payoff(node: NodeView) -> float:
    """Contribution of one End node to its parent's expected value."""
    return clamp(node.payoff * (node.probability_percent / 100.0))


class EvaluationEngine:
    """Computes expected values over a NodeStore. Never mutates, never raises."""

    def __init__(self, store: NodeStore) -> None:
        self.store = store
        self._memo: dict[str, float] = {}
        self._memo_version: Optional[int] = None

    def expected_value(self, node_id: Optional[str]) -> float:
        """
        Expected value of a Chance node; 0.0 for any other kind or a missing id.
        A Chance node with no End children is 0.0.
        """
        with self.store.lock:
            self._sync()
            if node_id in self._memo:
                return self._memo[node_id]
            node = self.store.find(node_id)
            if node is None:
                return 0.0
            value = self._compute(node)
            self._memo[node.id] = value
            return value

    def expected_values(self) -> dict[str, float]:
        """Expected value of every Chance node, keyed by id in pre-order."""
        with self.store.lock:
            return {
                node.id: self.expected_value(node.id)
                for node in self.store.flatten()
                if node.kind == NodeKind.CHANCE
            }

    def probability_total(self, node_id: Optional[str]) -> float:
        """Sum of End-child probabilities under a Chance node (0.0 otherwise)."""
        with self.store.lock:
            node = self.store.find(node_id)
            if node is None or node.kind != NodeKind.CHANCE:
                return 0.0
            return bounded_sum(
                c.probability_percent for c in self.store.children(node.id) if c.kind == NodeKind.END
            )

    def _compute(self, node: NodeView) -> float:
        if node.kind != NodeKind.CHANCE:
            return 0.0
        return bounded_sum(weighted_payoff(c) for c in self.store.children(node.id) if c.kind == NodeKind.END)

    def _sync(self) -> None:
        version = self.store.version
        if version != self._memo_version:
            if self._memo:
                logger.debug("Dropping %d memoized values (store version %s)", len(self._memo), version)
            self._memo.clear()
            self._memo_version = version
