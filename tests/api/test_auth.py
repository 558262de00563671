from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from credential_registry.services import token_service
from tests.conftest import OWNER, credential_body, mint_token


def _issue_with(client: TestClient, token: str):
    return client.post(
        "/v1/credentials",
        json=credential_body(),
        headers={"Authorization": f"Bearer {token}"},
    )


def _signed(**overrides) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": OWNER,
        "iss": token_service.ISSUER,
        "aud": token_service.AUDIENCE,
        "exp": now + timedelta(minutes=5),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    payload.update(overrides)
    return jwt.encode(payload, token_service._private_key, algorithm="ES256")


def test_valid_token_is_accepted(client: TestClient) -> None:
    assert _issue_with(client, mint_token(OWNER)).status_code == 202


def test_missing_token_is_401_with_challenge(client: TestClient) -> None:
    resp = client.post("/v1/credentials", json=credential_body())
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_garbage_token_is_401(client: TestClient) -> None:
    resp = _issue_with(client, "total-garbage")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_expired_token_is_401(client: TestClient) -> None:
    token = token_service.create_access_token(sub=OWNER, ttl_minutes=-1)
    resp = _issue_with(client, token)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_tampered_signature_is_401(client: TestClient) -> None:
    header, payload, _ = mint_token(OWNER).split(".")
    other = mint_token("0x" + "b" * 40).split(".")[2]
    resp = _issue_with(client, f"{header}.{payload}.{other}")
    assert resp.status_code == 401


def test_symmetric_algorithm_is_rejected(client: TestClient) -> None:
    token = jwt.encode(
        {"sub": OWNER, "iss": token_service.ISSUER, "aud": token_service.AUDIENCE},
        "a-shared-secret-long-enough-for-hmac-sha256",
        algorithm="HS256",
    )
    assert _issue_with(client, token).status_code == 401


@pytest.mark.parametrize(
    "claims",
    [
        {"aud": "someone-else"},
        {"iss": "someone-else"},
    ],
)
def test_wrong_issuer_or_audience_is_401(client: TestClient, claims: dict) -> None:
    assert _issue_with(client, _signed(**claims)).status_code == 401


def test_subject_must_be_an_address(client: TestClient) -> None:
    resp = _issue_with(client, _signed(sub="registrar"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token subject is not a valid identity"


def test_subject_is_normalized(client: TestClient) -> None:
    resp = _issue_with(client, _signed(sub=OWNER.upper().replace("0X", "0x")))
    assert resp.status_code == 202
    assert resp.json()["caller"] == OWNER


def test_read_endpoints_are_public(client: TestClient) -> None:
    assert client.get("/v1/credentials/0xh1").status_code == 200
    assert client.get("/v1/credentials").status_code == 200
    assert client.get("/v1/registry").status_code == 200
    assert client.get(f"/v1/authorities/{OWNER}").status_code == 200
