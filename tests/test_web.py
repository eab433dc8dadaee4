"""Tests for the FastAPI front end."""

import pytest
from fastapi.testclient import TestClient

from malla.web.app import create_app


@pytest.fixture
def client(engine):
    return TestClient(create_app(engine))


class TestItems:
    def test_list(self, client):
        resp = client.get("/items")
        assert resp.status_code == 200
        body = resp.json()
        assert [i["status"] for i in body] == ["available", "locked", "locked"]
        assert body[2]["requires"] == ["A", "B"]
        assert body[0]["label"] == "Course A"


class TestToggle:
    def test_rejected(self, client, kv):
        resp = client.post("/items/B/toggle")
        assert resp.status_code == 409
        assert resp.json()["missing"] == [{"id": "A", "label": "Course A"}]
        assert kv.data == {}

    def test_accepted(self, client, store):
        resp = client.post("/items/A/toggle")
        assert resp.status_code == 200
        body = resp.json()
        assert body["action"] == "completed"
        assert body["completed"] == ["A"]
        assert [i["status"] for i in body["items"]] == ["completed", "available", "locked"]
        assert store.load() == frozenset({"A"})

    def test_unknown(self, client):
        assert client.post("/items/Z/toggle").status_code == 404


class TestDiagnostics:
    def test_levels(self, client):
        body = client.get("/diagnostics").json()
        assert body["levels"] == [["A"], ["B"], ["C"]]
        assert body["cycle_members"] == []
