"""Tests for the liveness endpoint."""

from fastapi.testclient import TestClient

from latency_demo.utils.server import create_app


def test_root_reports_ok():
    client = TestClient(create_app())

    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "ok"


def test_unknown_path_is_not_found():
    client = TestClient(create_app())

    assert client.get("/missing").status_code == 404
