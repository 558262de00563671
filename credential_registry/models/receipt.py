from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from uuid import uuid4

RECEIPT_STATUSES = ("pending", "confirmed", "failed")

# Mutating registry operations that go through the submission queue.
OPERATIONS = ("issue", "revoke", "add_authority", "remove_authority")


@dataclass(frozen=True, slots=True)
class Receipt:
    """Tracks one submitted registry transaction: pending → confirmed|failed.

    ``result`` holds the committed record for confirmed transactions;
    ``error_code``/``error`` describe why a failed one was rejected.
    """

    id: str
    operation: str
    caller: str
    submitted_at: int
    status: str = "pending"
    completed_at: int | None = None
    result: dict | None = None
    error_code: str | None = None
    error: str | None = None

    @staticmethod
    def new(*, operation: str, caller: str, submitted_at: int) -> Receipt:
        if operation not in OPERATIONS:
            raise ValueError(f"unknown registry operation {operation!r}")
        return Receipt(
            id=str(uuid4()),
            operation=operation,
            caller=caller,
            submitted_at=submitted_at,
        )

    def confirm(self, *, completed_at: int, result: dict) -> Receipt:
        return replace(
            self, status="confirmed", completed_at=completed_at, result=result
        )

    def fail(self, *, completed_at: int, error_code: str, error: str) -> Receipt:
        return replace(
            self,
            status="failed",
            completed_at=completed_at,
            error_code=error_code,
            error=error,
        )

    @property
    def is_final(self) -> bool:
        return self.status != "pending"

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> Receipt:
        return Receipt(**data)
