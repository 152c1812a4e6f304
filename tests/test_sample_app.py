"""
Unit tests for the in-memory sample endpoint.
"""

from fastapi.testclient import TestClient

from loadgen import sample_app

client = TestClient(sample_app.app)


def setup_function():
    sample_app._clear()


def test_hello():
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Hello, World!"


def test_hostname():
    assert client.get("/hostname").json()["hostname"]


def test_create_and_list_samples():
    resp = client.post("/sample", json={"message": "hi"})
    assert resp.status_code == 201
    assert resp.json()["id"] == 1
    client.post("/sample", json={"message": "again"})
    assert [s["message"] for s in client.get("/sample").json()] == ["hi", "again"]


def test_create_requires_message():
    assert client.post("/sample", json={}).status_code == 422


def test_samples_capped(monkeypatch):
    """Only the newest ``MAX_SAMPLES`` are kept; ids keep counting."""
    monkeypatch.setattr(sample_app, "MAX_SAMPLES", 2)
    for msg in ("a", "b", "c"):
        client.post("/sample", json={"message": msg})
    assert [(s["id"], s["message"]) for s in client.get("/sample").json()] == [(2, "b"), (3, "c")]
