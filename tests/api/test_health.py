from __future__ import annotations

from fastapi.testclient import TestClient

from credential_registry.services.registry import registry_repo
from tests.conftest import OWNER, auth_headers, credential_body


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # In tests neither Redis nor Postgres is configured.
    assert data["checks"] == {"redis": "not_configured", "database": "not_configured"}


def test_health_includes_registry_summary(client: TestClient) -> None:
    client.post("/v1/credentials", json=credential_body(), headers=auth_headers(OWNER))
    registry = client.get("/health").json()["registry"]
    assert registry == {"owner": OWNER, "total": 1, "revoked": 0, "active": 1}


def test_health_degraded_without_owner(client: TestClient) -> None:
    registry_repo.clear()  # type: ignore[union-attr]
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["registry"] is None


def test_ready_returns_200(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200


def test_ready_returns_503_before_genesis(client: TestClient) -> None:
    registry_repo.clear()  # type: ignore[union-attr]
    resp = client.get("/ready")
    assert resp.status_code == 503
