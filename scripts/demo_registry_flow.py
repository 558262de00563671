"""Demo: walk a university through the credential lifecycle using TestClient.

Run with:
    python scripts/demo_registry_flow.py

Uses the in-memory registry (no DATABASE_URL/REDIS_URL), so submitted
transactions are applied as soon as each response is sent.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from credential_registry.core.config import SETTINGS
from credential_registry.main import app
from credential_registry.services.token_service import create_access_token

OWNER = SETTINGS.registry_owner
UNIVERSITY = "0x" + "1" * 40
STRANGER = "0x" + "f" * 40

ALICE = {
    "student_name": "Alice",
    "university_name": "Uni A",
    "degree_type": "BSc",
    "field_of_study": "Computer Science",
    "graduation_date": 1_700_000_000,
}


def _headers(identity: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(sub=identity)}"}


def _outcome(client: TestClient, resp) -> str:
    receipt = client.get(f"/v1/receipts/{resp.json()['receipt_id']}").json()
    if receipt["status"] == "failed":
        return f"failed ({receipt['error_code']})"
    return receipt["status"]


def main() -> None:
    # Entering the client runs the lifespan, which performs genesis.
    with TestClient(app) as client:
        r = client.get("/v1/registry")
        print(f"1. GET  /v1/registry                → owner={r.json()['owner']}")

        r = client.post(
            "/v1/authorities", json={"identity": UNIVERSITY}, headers=_headers(OWNER)
        )
        print(f"2. POST /v1/authorities (owner)     → {r.status_code} {_outcome(client, r)}")

        r = client.post("/v1/credentials/hash", json=ALICE)
        h1 = r.json()["credential_hash"]
        print(f"3. POST /v1/credentials/hash        → {h1[:18]}…")

        r = client.post(
            "/v1/credentials",
            json={**ALICE, "credential_hash": h1},
            headers=_headers(UNIVERSITY),
        )
        print(f"4. POST /v1/credentials (issue H1)  → {r.status_code} {_outcome(client, r)}")

        r = client.get(f"/v1/credentials/{h1}")
        print(f"5. GET  /v1/credentials/H1          → is_valid={r.json()['is_valid']}")

        r = client.delete(f"/v1/authorities/{UNIVERSITY}", headers=_headers(OWNER))
        print(f"6. DELETE /v1/authorities/U1        → {r.status_code} {_outcome(client, r)}")

        r = client.post(f"/v1/credentials/{h1}/revoke", headers=_headers(UNIVERSITY))
        print(f"7. POST revoke H1 (removed issuer)  → {r.status_code} {_outcome(client, r)}")

        r = client.get(f"/v1/credentials/{h1}")
        print(f"8. GET  /v1/credentials/H1          → status={r.json()['credential']['status']}")

        r = client.post(
            "/v1/credentials",
            json={**ALICE, "credential_hash": h1},
            headers=_headers(STRANGER),
        )
        print(f"9. POST issue H1 (stranger)         → {_outcome(client, r)}")

        r = client.post(
            "/v1/credentials",
            json={**ALICE, "credential_hash": "0xh2"},
            headers=_headers(STRANGER),
        )
        print(f"10. POST issue H2 (stranger)        → {_outcome(client, r)}")

        summary = client.get("/v1/registry").json()
        print(f"\nRegistry: total={summary['total']} revoked={summary['revoked']}")


if __name__ == "__main__":
    main()
