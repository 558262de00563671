"""Transaction receipts.

Every mutating endpoint answers 202 Accepted with a ``pending`` receipt.
Clients poll GET /v1/receipts/{id} until the status is ``confirmed`` (the
registry committed the change) or ``failed`` (the registry rejected it;
``error_code`` says why).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException
from pydantic import BaseModel

from credential_registry.core.config import SETTINGS
from credential_registry.models.receipt import Receipt
from credential_registry.services import transactions
from credential_registry.services.receipts import receipt_store
from credential_registry.services.task_queue import REGISTRY_QUEUE
from credential_registry.worker import drain

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/receipts", tags=["receipts"])


class ReceiptOut(BaseModel):
    receipt_id: str
    operation: str
    caller: str
    status: str
    submitted_at: int
    completed_at: int | None = None
    result: dict | None = None
    error_code: str | None = None
    error: str | None = None

    @staticmethod
    def from_receipt(receipt: Receipt) -> ReceiptOut:
        return ReceiptOut(
            receipt_id=receipt.id,
            operation=receipt.operation,
            caller=receipt.caller,
            status=receipt.status,
            submitted_at=receipt.submitted_at,
            completed_at=receipt.completed_at,
            result=receipt.result,
            error_code=receipt.error_code,
            error=receipt.error,
        )


async def accept_submission(
    background_tasks: BackgroundTasks,
    operation: str,
    caller: str,
    args: dict,
) -> ReceiptOut:
    """Queue a registry transaction and return its pending receipt.

    With no Redis there is no worker process, so the queued transaction is
    applied in this process once the response has been sent.
    """
    receipt = await transactions.submit(operation, caller, args)
    if SETTINGS.applies_inline:
        background_tasks.add_task(drain, REGISTRY_QUEUE)
    return ReceiptOut.from_receipt(receipt)


@router.get("/{receipt_id}", response_model=ReceiptOut)
async def get_receipt(receipt_id: str) -> ReceiptOut:
    receipt = await receipt_store.get(receipt_id)
    if receipt is None:
        raise HTTPException(status_code=404, detail="receipt not found")
    return ReceiptOut.from_receipt(receipt)
