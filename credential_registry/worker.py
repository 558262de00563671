"""Background worker that applies submitted registry transactions.

RUN:  python -m credential_registry.worker

The API only queues mutations; this process pops them one at a time and
applies them to the registry, finalizing each receipt.  Same image as the
API, different command:

  api:    uvicorn credential_registry.main:app --host 0.0.0.0 --port 8000
  worker: python -m credential_registry.worker

Without REDIS_URL the queue is process-local, so the API calls ``drain``
itself after responding and no worker process is needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from credential_registry.core.config import SETTINGS
from credential_registry.core.logging import setup_logging
from credential_registry.core.metrics import QUEUE_DEPTH
from credential_registry.services.registry import registry
from credential_registry.services.task_queue import REGISTRY_QUEUE, TaskQueue, task_queue
from credential_registry.services.transactions import apply_transaction

TaskHandler = Callable[[dict], Coroutine[Any, Any, Any]]

logger = logging.getLogger("credential_registry.worker")

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


@register_handler(REGISTRY_QUEUE)
async def handle_registry_transaction(payload: dict) -> None:
    receipt = await apply_transaction(payload)
    logger.info(
        "Receipt %s %s",
        receipt.id,
        receipt.status,
        extra={
            "receipt_id": receipt.id,
            "operation": receipt.operation,
            "caller": receipt.caller,
            "error_code": receipt.error_code,
        },
    )


async def process_next(
    queue_name: str, *, queue: TaskQueue = task_queue, timeout: int = 0
) -> bool:
    """Pop and handle one task.  Returns False when the queue was empty."""
    task = await queue.dequeue(queue_name, timeout=timeout)
    QUEUE_DEPTH.labels(queue_name=queue_name).set(await queue.queue_length(queue_name))
    if task is None:
        return False

    handler = HANDLERS[queue_name]
    try:
        await handler(task.payload)
    except Exception:
        logger.exception("Task %s on [%s] failed", task.id, queue_name)
    return True


async def drain(queue_name: str = REGISTRY_QUEUE, *, queue: TaskQueue = task_queue) -> int:
    """Handle every task currently queued.  Returns how many were handled."""
    handled = 0
    while await process_next(queue_name, queue=queue):
        handled += 1
    return handled


async def run_worker() -> None:
    """Poll all registered queues forever."""
    await registry.genesis(SETTINGS.registry_owner)

    queues = list(HANDLERS.keys())
    logger.info("Worker started, listening on queues: %s", queues)

    while True:
        for queue_name in queues:
            await process_next(queue_name, timeout=1)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
