from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from credential_registry.main import app
from credential_registry.services import token_service
from credential_registry.services.receipts import receipt_store
from credential_registry.services.registry import registry, registry_repo
from credential_registry.services.task_queue import task_queue

# Ensure repo root is on sys.path so `import credential_registry` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

OWNER = "0x" + "a" * 40
UNIVERSITY = "0x" + "1" * 40
OTHER_UNIVERSITY = "0x" + "2" * 40
STRANGER = "0x" + "f" * 40


@pytest.fixture(autouse=True)
def reset_registry() -> None:
    """Fresh registry owned by OWNER for every test."""
    if hasattr(registry_repo, "clear"):
        registry_repo.clear()  # type: ignore[union-attr]
    asyncio.run(registry.genesis(OWNER))


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Clear task queues between tests."""
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_receipts() -> None:
    if hasattr(receipt_store, "_store"):
        receipt_store._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(identity: str = OWNER) -> str:
    """Create a valid ES256 JWT whose subject is ``identity``."""
    return token_service.create_access_token(sub=identity)


def auth_headers(identity: str = OWNER) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(identity)}"}


def credential_body(credential_hash: str = "0xh1", **overrides) -> dict:
    body = {
        "credential_hash": credential_hash,
        "student_name": "Alice",
        "university_name": "Uni A",
        "degree_type": "BSc",
        "field_of_study": "CS",
        "graduation_date": 1_700_000_000,
    }
    body.update(overrides)
    return body
