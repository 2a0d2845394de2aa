"""API tests for tree workspace, node mutations and expected values."""

import pytest
from fastapi.testclient import TestClient


def add_node(client: TestClient, tree_id: str, kind: str, parent_id=None, **fields) -> dict:
    body = {"kind": kind, "parent_id": parent_id}
    if fields:
        body["fields"] = fields
    r = client.post(f"/api/trees/{tree_id}/nodes", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def test_root(client: TestClient):
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert data["service"] == "Branchwise"
    assert "api" in data


def test_health(client: TestClient, tree_id):
    add_node(client, tree_id, "Decision")
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["checks"]["workspace"] == {"status": "up", "trees": 1, "nodes": 1}


def test_list_trees_empty(client: TestClient):
    r = client.get("/api/trees/")
    assert r.status_code == 200
    assert r.json() == []


def test_create_and_get_tree(client: TestClient, tree_id):
    r = client.get(f"/api/trees/{tree_id}")
    assert r.status_code == 200
    data = r.json()
    assert data["name"] == "Launch decision"
    assert data["node_count"] == 0
    assert data["forest"] == []

    listed = client.get("/api/trees/").json()
    assert [t["id"] for t in listed] == [tree_id]


def test_create_tree_generates_id(client: TestClient):
    r = client.post("/api/trees/", json={"name": "Anon"})
    assert r.status_code == 201
    assert r.json()["id"].startswith("tree-")


def test_create_duplicate_tree(client: TestClient, tree_id):
    r = client.post("/api/trees/", json={"name": "again", "id": tree_id})
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_operation"


def test_delete_tree(client: TestClient, tree_id):
    r = client.delete(f"/api/trees/{tree_id}")
    assert r.status_code == 204
    r2 = client.get(f"/api/trees/{tree_id}")
    assert r2.status_code == 404
    assert r2.json()["code"] == "tree_not_found"


def test_create_nodes_and_flatten(client: TestClient, tree_id):
    d = add_node(client, tree_id, "Decision", label="Launch now?")
    c = add_node(client, tree_id, "Chance", parent_id=d["id"])
    e = add_node(client, tree_id, "End", parent_id=c["id"], outcome="Hit", payoff=10, probability_percent=50)
    assert d["level"] == 1 and c["level"] == 2 and e["level"] == 3
    assert d["label"] == "Launch now?"
    assert e["outcome"] == "Hit"

    r = client.get(f"/api/trees/{tree_id}/nodes")
    assert r.status_code == 200
    assert [n["id"] for n in r.json()] == [d["id"], c["id"], e["id"]]


def test_child_of_end_node_conflicts(client: TestClient, tree_id):
    e = add_node(client, tree_id, "End")
    r = client.post(f"/api/trees/{tree_id}/nodes", json={"kind": "Decision", "parent_id": e["id"]})
    assert r.status_code == 409
    body = r.json()
    assert body["code"] == "invalid_operation"
    assert body["node_id"] == e["id"]


def test_missing_parent_is_404(client: TestClient, tree_id):
    r = client.post(f"/api/trees/{tree_id}/nodes", json={"kind": "Decision", "parent_id": "ghost"})
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_invalid_kind_is_422(client: TestClient, tree_id):
    r = client.post(f"/api/trees/{tree_id}/nodes", json={"kind": "Leaf"})
    assert r.status_code == 422


def test_patch_node(client: TestClient, tree_id):
    e = add_node(client, tree_id, "End")
    r = client.patch(f"/api/trees/{tree_id}/nodes/{e['id']}", json={"payoff": -5, "label": "ignored"})
    assert r.status_code == 200
    assert r.json()["payoff"] == -5
    assert r.json()["label"] == ""

    r2 = client.patch(f"/api/trees/{tree_id}/nodes/ghost", json={"payoff": 1})
    assert r2.status_code == 404


def test_delete_node_subtree_and_noop(client: TestClient, tree_id):
    c = add_node(client, tree_id, "Chance")
    e = add_node(client, tree_id, "End", parent_id=c["id"])
    r = client.delete(f"/api/trees/{tree_id}/nodes/{c['id']}")
    assert r.status_code == 204
    assert client.get(f"/api/trees/{tree_id}/nodes/{e['id']}").status_code == 404
    assert client.get(f"/api/trees/{tree_id}/nodes").json() == []

    r2 = client.delete(f"/api/trees/{tree_id}/nodes/{c['id']}")
    assert r2.status_code == 204


def test_expected_value_scenario(client: TestClient, tree_id):
    c = add_node(client, tree_id, "Chance", decision_note="demand")
    e1 = add_node(client, tree_id, "End", parent_id=c["id"], payoff=200, probability_percent=30)
    add_node(client, tree_id, "End", parent_id=c["id"], payoff=-50, probability_percent=70)

    r = client.get(f"/api/trees/{tree_id}/nodes/{c['id']}/expected-value")
    assert r.status_code == 200
    data = r.json()
    assert data["kind"] == "Chance"
    assert data["expected_value"] == pytest.approx(25.0)
    assert data["probability_total"] == pytest.approx(100.0)

    client.delete(f"/api/trees/{tree_id}/nodes/{e1['id']}")
    r2 = client.get(f"/api/trees/{tree_id}/expected-values")
    assert r2.json()["values"] == {c["id"]: pytest.approx(-35.0)}


def test_expected_value_missing_node_is_404(client: TestClient, tree_id):
    r = client.get(f"/api/trees/{tree_id}/nodes/ghost/expected-value")
    assert r.status_code == 404


def test_forest_roundtrip(client: TestClient, tree_id):
    forest = [
        {
            "id": "root",
            "kind": "Chance",
            "children": [
                {"id": "win", "kind": "End", "payoff": 100, "probability_percent": 50},
                {"id": "lose", "kind": "End", "payoff": 0, "probability_percent": 50},
            ],
        }
    ]
    r = client.put(f"/api/trees/{tree_id}/forest", json=forest)
    assert r.status_code == 200
    assert r.json()["loaded"] == 3

    got = client.get(f"/api/trees/{tree_id}/forest").json()
    assert got[0]["id"] == "root"
    assert [c["level"] for c in got[0]["children"]] == [2, 2]

    ev = client.get(f"/api/trees/{tree_id}/nodes/root/expected-value").json()
    assert ev["expected_value"] == pytest.approx(50.0)


def test_forest_rejects_children_under_end(client: TestClient, tree_id):
    r = client.put(
        f"/api/trees/{tree_id}/forest",
        json=[{"id": "e", "kind": "End", "children": [{"id": "x", "kind": "Decision"}]}],
    )
    assert r.status_code == 409


def test_validate(client: TestClient, tree_id):
    c = add_node(client, tree_id, "Chance")
    add_node(client, tree_id, "End", parent_id=c["id"], probability_percent=150)
    r = client.get(f"/api/trees/{tree_id}/validate")
    assert r.status_code == 200
    data = r.json()
    assert data["valid"] is False
    assert {i["code"] for i in data["issues"]} == {"probability_sum", "probability_range"}


def test_patch_ignores_mistyped_irrelevant_fields(client: TestClient, tree_id):
    d = add_node(client, tree_id, "Decision")
    r = client.patch(f"/api/trees/{tree_id}/nodes/{d['id']}", json={"payoff": "x", "label": "Ship it"})
    assert r.status_code == 200
    assert r.json()["label"] == "Ship it"

    r2 = client.patch(f"/api/trees/{tree_id}/nodes/ghost", json={"payoff": "x"})
    assert r2.status_code == 404


def test_mistyped_relevant_field_is_422(client: TestClient, tree_id):
    e = add_node(client, tree_id, "End")
    r = client.patch(f"/api/trees/{tree_id}/nodes/{e['id']}", json={"payoff": "x"})
    assert r.status_code == 422

    r2 = client.post(f"/api/trees/{tree_id}/nodes", json={"kind": "End", "fields": {"probability_percent": "half"}})
    assert r2.status_code == 422
    assert [n["id"] for n in client.get(f"/api/trees/{tree_id}/nodes").json()] == [e["id"]]
