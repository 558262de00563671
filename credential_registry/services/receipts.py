"""Receipt storage for submitted transactions.

Receipts live beside the queue rather than in the registry: they describe
the submission, not registry state, and expire after RECEIPT_TTL_SECONDS
when stored in Redis.
"""

from __future__ import annotations

import json
from typing import Protocol, runtime_checkable

from credential_registry.core.config import SETTINGS
from credential_registry.db.redis import redis_pool
from credential_registry.models.receipt import Receipt


@runtime_checkable
class ReceiptStore(Protocol):
    async def get(self, receipt_id: str) -> Receipt | None: ...
    async def save(self, receipt: Receipt) -> None: ...


class InMemoryReceiptStore:
    """No expiry; the autouse fixture in conftest.py clears it between tests."""

    def __init__(self) -> None:
        self._store: dict[str, Receipt] = {}

    async def get(self, receipt_id: str) -> Receipt | None:
        return self._store.get(receipt_id)

    async def save(self, receipt: Receipt) -> None:
        self._store[receipt.id] = receipt


class RedisReceiptStore:
    _PREFIX = "receipt:"

    def __init__(self, redis_client, ttl_seconds: int) -> None:
        self._redis = redis_client
        self._ttl = ttl_seconds

    async def get(self, receipt_id: str) -> Receipt | None:
        raw = await self._redis.get(f"{self._PREFIX}{receipt_id}")
        if raw is None:
            return None
        return Receipt.from_dict(json.loads(raw))

    async def save(self, receipt: Receipt) -> None:
        await self._redis.setex(
            f"{self._PREFIX}{receipt.id}", self._ttl, json.dumps(receipt.to_dict())
        )


if redis_pool is not None:
    receipt_store: ReceiptStore = RedisReceiptStore(
        redis_pool, SETTINGS.receipt_ttl_seconds
    )
else:
    receipt_store = InMemoryReceiptStore()
