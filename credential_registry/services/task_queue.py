"""Queue of submitted registry transactions.

Producer (API):    LPUSH the transaction and return 202 with a receipt.
Consumer (worker): BRPOP, apply to the registry, finalize the receipt.

LPUSH at the head and BRPOP from the tail gives FIFO order, so
transactions from one queue are applied in submission order.  Delivery
is at-most-once; a transaction lost to a worker crash leaves its receipt
``pending`` and the client resubmits.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from credential_registry.db.redis import redis_pool

REGISTRY_QUEUE = "registry_transactions"


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of background work.

    id:      Unique identifier for tracking and logging.
    queue:   Queue the task was pushed onto.
    payload: JSON-serializable data for the queue's handler.
    """

    id: str
    queue: str
    payload: dict


@runtime_checkable
class TaskQueue(Protocol):
    async def enqueue(self, queue: str, payload: dict) -> Task: ...
    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None: ...
    async def queue_length(self, queue: str) -> int: ...


class InMemoryTaskQueue:
    """Process-local FIFO queues, used when REDIS_URL is not set."""

    def __init__(self) -> None:
        self._queues: dict[str, list[Task]] = {}

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task(id=str(uuid.uuid4()), queue=queue, payload=payload)
        self._queues.setdefault(queue, []).append(task)
        return task

    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None:
        tasks = self._queues.get(queue, [])
        if tasks:
            return tasks.pop(0)
        return None

    async def queue_length(self, queue: str) -> int:
        return len(self._queues.get(queue, []))


class RedisTaskQueue:
    """Redis-backed task queue using LPUSH/BRPOP."""

    _PREFIX = "tasks:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task(id=str(uuid.uuid4()), queue=queue, payload=payload)
        task_json = json.dumps({"id": task.id, "queue": task.queue, "payload": payload})
        await self._redis.lpush(f"{self._PREFIX}{queue}", task_json)
        return task

    async def dequeue(self, queue: str, timeout: int = 5) -> Task | None:
        # timeout=0 would block forever in BRPOP; treat it as a plain RPOP.
        if timeout <= 0:
            task_json = await self._redis.rpop(f"{self._PREFIX}{queue}")
            if task_json is None:
                return None
        else:
            result = await self._redis.brpop(f"{self._PREFIX}{queue}", timeout=timeout)
            if result is None:
                return None
            _, task_json = result
        return Task(**json.loads(task_json))

    async def queue_length(self, queue: str) -> int:
        return await self._redis.llen(f"{self._PREFIX}{queue}")


if redis_pool is not None:
    task_queue: TaskQueue = RedisTaskQueue(redis_pool)
else:
    task_queue = InMemoryTaskQueue()
