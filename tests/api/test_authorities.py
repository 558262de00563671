from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import (
    OTHER_UNIVERSITY,
    OWNER,
    STRANGER,
    UNIVERSITY,
    auth_headers,
    credential_body,
)


def _add(client: TestClient, identity: str, *, as_: str = OWNER):
    return client.post(
        "/v1/authorities", json={"identity": identity}, headers=auth_headers(as_)
    )


def _remove(client: TestClient, identity: str, *, as_: str = OWNER):
    return client.delete(f"/v1/authorities/{identity}", headers=auth_headers(as_))


def _status(client: TestClient, identity: str) -> dict:
    resp = client.get(f"/v1/authorities/{identity}")
    assert resp.status_code == 200
    return resp.json()


def test_owner_is_an_authority_after_genesis(client: TestClient) -> None:
    assert _status(client, OWNER) == {
        "identity": OWNER,
        "is_authority": True,
        "is_owner": True,
    }


def test_unknown_identity_is_not_an_authority(client: TestClient) -> None:
    assert _status(client, UNIVERSITY) == {
        "identity": UNIVERSITY,
        "is_authority": False,
        "is_owner": False,
    }


def test_owner_adds_authority(client: TestClient) -> None:
    resp = _add(client, UNIVERSITY)
    assert resp.status_code == 202
    assert resp.json()["operation"] == "add_authority"

    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    assert receipt["status"] == "confirmed"
    assert receipt["result"] == {"identity": UNIVERSITY, "is_authority": True}
    assert _status(client, UNIVERSITY)["is_authority"] is True


def test_add_is_idempotent(client: TestClient) -> None:
    _add(client, UNIVERSITY)
    resp = _add(client, UNIVERSITY)
    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    assert receipt["status"] == "confirmed"
    assert _status(client, UNIVERSITY)["is_authority"] is True


def test_owner_removes_authority(client: TestClient) -> None:
    _add(client, UNIVERSITY)
    resp = _remove(client, UNIVERSITY)
    assert resp.status_code == 202
    assert resp.json()["operation"] == "remove_authority"
    assert _status(client, UNIVERSITY)["is_authority"] is False


def test_remove_non_member_is_confirmed(client: TestClient) -> None:
    resp = _remove(client, OTHER_UNIVERSITY)
    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    assert receipt["status"] == "confirmed"
    assert _status(client, OTHER_UNIVERSITY)["is_authority"] is False


def test_non_owner_cannot_add(client: TestClient) -> None:
    _add(client, UNIVERSITY)
    resp = _add(client, OTHER_UNIVERSITY, as_=UNIVERSITY)
    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    assert receipt["status"] == "failed"
    assert receipt["error_code"] == "unauthorized"
    assert _status(client, OTHER_UNIVERSITY)["is_authority"] is False


def test_non_owner_cannot_remove(client: TestClient) -> None:
    _add(client, UNIVERSITY)
    resp = _remove(client, UNIVERSITY, as_=STRANGER)
    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    assert receipt["error_code"] == "unauthorized"
    assert _status(client, UNIVERSITY)["is_authority"] is True


def test_identities_are_normalized_to_lowercase(client: TestClient) -> None:
    mixed = "0x" + "AbCdEf" * 6 + "ABCD"
    _add(client, mixed)
    assert _status(client, mixed.lower())["is_authority"] is True
    assert _status(client, mixed)["identity"] == mixed.lower()


def test_malformed_identity_rejected(client: TestClient) -> None:
    assert _add(client, "not-an-address").status_code == 422
    assert _remove(client, "0x1234").status_code == 422
    assert client.get("/v1/authorities/0xzz").status_code == 422


def test_authority_changes_require_auth(client: TestClient) -> None:
    assert client.post("/v1/authorities", json={"identity": UNIVERSITY}).status_code == 401
    assert client.delete(f"/v1/authorities/{UNIVERSITY}").status_code == 401


def test_removed_authority_can_revoke_own_issuance(client: TestClient) -> None:
    _add(client, UNIVERSITY)
    client.post(
        "/v1/credentials", json=credential_body(), headers=auth_headers(UNIVERSITY)
    )
    _remove(client, UNIVERSITY)

    resp = client.post("/v1/credentials/0xh1/revoke", headers=auth_headers(UNIVERSITY))
    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    assert receipt["status"] == "confirmed"
    assert client.get("/v1/credentials/0xh1").json()["credential"]["is_revoked"] is True


def _listed(client: TestClient) -> list[dict]:
    resp = client.get("/v1/authorities")
    assert resp.status_code == 200
    return resp.json()["items"]


def test_authority_list_starts_with_owner(client: TestClient) -> None:
    assert _listed(client) == [
        {"identity": OWNER, "is_authority": True, "is_owner": True}
    ]


def test_authority_list_follows_add_and_remove(client: TestClient) -> None:
    _add(client, UNIVERSITY)
    _add(client, OTHER_UNIVERSITY)
    assert [item["identity"] for item in _listed(client)] == sorted(
        [OWNER, UNIVERSITY, OTHER_UNIVERSITY]
    )

    _remove(client, UNIVERSITY)
    listed = _listed(client)
    assert [item["identity"] for item in listed] == sorted([OWNER, OTHER_UNIVERSITY])
    assert [item["is_owner"] for item in listed if item["identity"] == OWNER] == [True]


def test_authority_list_is_public(client: TestClient) -> None:
    assert client.get("/v1/authorities", headers=auth_headers(STRANGER)).status_code == 200
