"""Submission and application of registry transactions.

``submit`` records a pending receipt and queues the transaction.
``apply_transaction`` is what the worker runs for each queued item: it
performs the registry operation and finalizes the receipt as confirmed or
failed.  A receipt that is already final is never applied twice.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict

from credential_registry.core.errors import RegistryError
from credential_registry.models.receipt import Receipt
from credential_registry.services.receipts import ReceiptStore, receipt_store
from credential_registry.services.registry import CredentialRegistry, registry
from credential_registry.services.task_queue import REGISTRY_QUEUE, TaskQueue, task_queue

logger = logging.getLogger(__name__)


async def submit(
    operation: str,
    caller: str,
    args: dict,
    *,
    queue: TaskQueue = task_queue,
    receipts: ReceiptStore = receipt_store,
) -> Receipt:
    receipt = Receipt.new(operation=operation, caller=caller, submitted_at=int(time.time()))
    await receipts.save(receipt)
    await queue.enqueue(
        REGISTRY_QUEUE,
        {
            "receipt_id": receipt.id,
            "operation": operation,
            "caller": caller,
            "args": args,
            "submitted_at": receipt.submitted_at,
        },
    )
    logger.info(
        "Submitted %s from %s",
        operation,
        caller,
        extra={"operation": operation, "caller": caller, "receipt_id": receipt.id},
    )
    return receipt


async def _dispatch(
    reg: CredentialRegistry, operation: str, caller: str, args: dict
) -> dict:
    if operation == "issue":
        credential = await reg.issue(caller, **args)
        return asdict(credential)
    if operation == "revoke":
        credential = await reg.revoke(caller, args["credential_hash"])
        return asdict(credential)
    if operation == "add_authority":
        await reg.add_authority(caller, args["identity"])
        return {"identity": args["identity"], "is_authority": True}
    if operation == "remove_authority":
        await reg.remove_authority(caller, args["identity"])
        return {"identity": args["identity"], "is_authority": False}
    raise ValueError(f"unknown registry operation {operation!r}")


async def apply_transaction(
    payload: dict,
    *,
    reg: CredentialRegistry = registry,
    receipts: ReceiptStore = receipt_store,
) -> Receipt:
    receipt_id = payload["receipt_id"]
    operation = payload["operation"]
    caller = payload["caller"]
    log_extra = {"operation": operation, "caller": caller, "receipt_id": receipt_id}

    receipt = await receipts.get(receipt_id)
    if receipt is None:
        # Expired or lost receipt: apply anyway and record a fresh one.
        logger.warning("Receipt %s missing; recreating", receipt_id, extra=log_extra)
        receipt = Receipt(
            id=receipt_id,
            operation=operation,
            caller=caller,
            submitted_at=payload.get("submitted_at", int(time.time())),
        )
    elif receipt.is_final:
        logger.warning(
            "Receipt %s already %s; skipping redelivery",
            receipt_id,
            receipt.status,
            extra=log_extra,
        )
        return receipt

    try:
        result = await _dispatch(reg, operation, caller, payload.get("args", {}))
    except RegistryError as e:
        receipt = receipt.fail(
            completed_at=int(time.time()), error_code=e.code, error=e.message
        )
    except Exception as e:
        logger.exception("Transaction %s crashed", receipt_id, extra=log_extra)
        receipt = receipt.fail(
            completed_at=int(time.time()), error_code="internal_error", error=str(e)
        )
    else:
        receipt = receipt.confirm(completed_at=int(time.time()), result=result)

    await receipts.save(receipt)
    return receipt
