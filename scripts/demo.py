#!/usr/bin/env python3
"""
Build a small product-launch decision tree and print expected values.

Usage (from project root):
  python scripts/demo.py

Output: formatted table of every node, then the expected value of each
Chance node and any validation findings.
"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def build(store):
    from shared.schemas import NodeKind

    launch = store.create_node(None, NodeKind.DECISION)
    store.update_node(launch, {"label": "Launch the product this quarter?"})

    market = store.create_node(launch, NodeKind.CHANCE)
    store.update_node(market, {"decision_note": "Market reaction"})
    for outcome, payoff, p in (("Strong demand", 200, 30), ("Weak demand", -50, 70)):
        end = store.create_node(market, NodeKind.END)
        store.update_node(end, {"outcome": outcome, "payoff": payoff, "probability_percent": p})

    wait = store.create_node(launch, NodeKind.END)
    store.update_node(wait, {"outcome": "Wait a quarter", "payoff": 0, "probability_percent": 100})
    return market


def describe(node) -> str:
    if node.kind.value == "Decision":
        return node.label
    if node.kind.value == "Chance":
        return node.decision_note
    return f"{node.outcome} ({node.probability_percent:g}% -> {node.payoff:g})"


def main() -> None:
    from backend.services import EvaluationEngine, NodeStore, validate_tree

    store = NodeStore()
    engine = EvaluationEngine(store)
    market = build(store)

    col_id = 10
    col_kind = 10
    header = f"{'Node':<{col_id}} {'Kind':<{col_kind}} Description"
    print(header)
    print("-" * (len(header) + 30))
    for node in store.flatten():
        indent = "  " * (node.level - 1)
        print(f"{node.id:<{col_id}} {node.kind.value:<{col_kind}} {indent}{describe(node)}")

    print()
    for node_id, value in engine.expected_values().items():
        print(f"Expected value of {node_id}: {value:g}")

    first_outcome = store.find(market).children[0]
    store.remove_node(first_outcome)
    print(f"After removing {first_outcome}: {engine.expected_value(market):g}")

    issues = validate_tree(store, tree_id="demo")
    print()
    print(f"Validation: {len(issues)} issue(s)")
    for issue in issues:
        print(f"  - [{issue.severity}] {issue.code}: {issue.message}")


if __name__ == "__main__":
    main()
