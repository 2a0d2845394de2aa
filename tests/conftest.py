"""
Pytest fixtures for Branchwise tests.

Each test gets a fresh in-memory TreeRegistry so trees never leak between tests.
Rate limiting is disabled and logs go to a temp directory.
"""

import os
import tempfile
from pathlib import Path

os.environ.setdefault("BRANCHWISE_LOG_DIR", str(Path(tempfile.gettempdir()) / "branchwise-test-logs"))
os.environ.setdefault("BRANCHWISE_RATE_LIMIT_REQUESTS", "0")

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.services import EvaluationEngine, NodeStore, TreeRegistry, get_registry


@pytest.fixture
def store():
    return NodeStore()


@pytest.fixture
def engine(store):
    return EvaluationEngine(store)


@pytest.fixture
def registry():
    return TreeRegistry()


@pytest.fixture
def client(registry):
    """FastAPI TestClient bound to a fresh registry."""
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def tree_id(client):
    r = client.post("/api/trees/", json={"name": "Launch decision", "id": "t1"})
    assert r.status_code == 201
    return "t1"
