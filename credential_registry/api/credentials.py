"""Credential issuance, revocation, verification and listing.

- POST /v1/credentials                  submit issuance (202 + receipt)
- POST /v1/credentials/{hash}/revoke    submit revocation (202 + receipt)
- POST /v1/credentials/hash             derive a content hash (public)
- GET  /v1/credentials/{hash}           verify (public)
- GET  /v1/credentials?offset=&limit=   page through issuance order (public),
                                        optionally filtered by status and
                                        university_name

Verification reports ``exists`` and ``is_revoked`` separately so a
verifier can tell "never issued" from "issued but revoked".
"""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel, Field

from credential_registry.api.dependencies import require_caller
from credential_registry.api.receipts import ReceiptOut, accept_submission
from credential_registry.models.credential import Credential
from credential_registry.models.principal import Principal
from credential_registry.services.hashing import HASH_ALGORITHM, compute_credential_hash
from credential_registry.services.registry import registry

router = APIRouter(prefix="/v1/credentials", tags=["credentials"])

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# graduation_date is stored in a signed 64-bit column.
MAX_TIMESTAMP = 2**63 - 1


class CredentialFieldsIn(BaseModel):
    student_name: str = Field(min_length=1, max_length=255)
    university_name: str = Field(min_length=1, max_length=255)
    degree_type: str = Field(min_length=1, max_length=128)
    field_of_study: str = Field(min_length=1, max_length=255)
    graduation_date: int = Field(ge=0, le=MAX_TIMESTAMP, description="Unix seconds")


class CredentialIssueIn(CredentialFieldsIn):
    credential_hash: str = Field(min_length=1, max_length=256, pattern=r"^[^/\s]+$")


class CredentialHashIn(CredentialFieldsIn):
    salt: str = Field(default="", max_length=128)


class CredentialHashOut(BaseModel):
    credential_hash: str
    algorithm: str


class CredentialOut(BaseModel):
    credential_hash: str
    student_name: str
    university_name: str
    degree_type: str
    field_of_study: str
    graduation_date: int
    is_revoked: bool
    issued_at: int
    issued_by: str
    status: str

    @staticmethod
    def from_credential(c: Credential) -> CredentialOut:
        return CredentialOut(
            credential_hash=c.credential_hash,
            student_name=c.student_name,
            university_name=c.university_name,
            degree_type=c.degree_type,
            field_of_study=c.field_of_study,
            graduation_date=c.graduation_date,
            is_revoked=c.is_revoked,
            issued_at=c.issued_at,
            issued_by=c.issued_by,
            status=c.status,
        )


class VerifyOut(BaseModel):
    credential_hash: str
    exists: bool
    is_valid: bool
    credential: CredentialOut | None = None


class CredentialPageOut(BaseModel):
    total: int
    offset: int
    limit: int
    items: list[CredentialOut]


@router.post(
    "",
    response_model=ReceiptOut,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_issue(
    body: CredentialIssueIn,
    background_tasks: BackgroundTasks,
    principal: Annotated[Principal, Depends(require_caller)],
) -> ReceiptOut:
    """Submit an issuance.  The caller must be an issuing authority when
    the transaction is applied, or the receipt fails with ``unauthorized``."""
    return await accept_submission(
        background_tasks, "issue", principal.identity, body.model_dump()
    )


@router.post(
    "/hash",
    response_model=CredentialHashOut,
)
def derive_hash(body: CredentialHashIn) -> CredentialHashOut:
    return CredentialHashOut(
        credential_hash=compute_credential_hash(**body.model_dump()),
        algorithm=HASH_ALGORITHM,
    )


@router.post(
    "/{credential_hash}/revoke",
    response_model=ReceiptOut,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_revoke(
    credential_hash: str,
    background_tasks: BackgroundTasks,
    principal: Annotated[Principal, Depends(require_caller)],
) -> ReceiptOut:
    return await accept_submission(
        background_tasks,
        "revoke",
        principal.identity,
        {"credential_hash": credential_hash},
    )


@router.get("/{credential_hash}", response_model=VerifyOut)
async def verify_credential(credential_hash: str) -> VerifyOut:
    result = await registry.verify(credential_hash)
    return VerifyOut(
        credential_hash=credential_hash,
        exists=result.exists,
        is_valid=result.is_valid,
        credential=(
            CredentialOut.from_credential(result.credential)
            if result.credential is not None
            else None
        ),
    )


@router.get("", response_model=CredentialPageOut)
async def list_credentials(
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    status_filter: Annotated[
        Literal["valid", "revoked"] | None, Query(alias="status")
    ] = None,
    university_name: Annotated[str | None, Query(min_length=1, max_length=255)] = None,
) -> CredentialPageOut:
    """Page through credentials in issuance order via the registry index.

    Filters apply to the page window: ``offset`` and ``limit`` select index
    positions, then non-matching credentials are dropped from that page.
    ``total`` is always the full index length.
    """
    total = await registry.count()
    items: list[CredentialOut] = []
    for index in range(offset, min(offset + limit, total)):
        result = await registry.verify(await registry.hash_at_index(index))
        credential = result.credential
        if credential is None:
            continue
        if status_filter == "valid" and credential.is_revoked:
            continue
        if status_filter == "revoked" and not credential.is_revoked:
            continue
        if university_name is not None and credential.university_name != university_name:
            continue
        items.append(CredentialOut.from_credential(credential))
    return CredentialPageOut(total=total, offset=offset, limit=limit, items=items)
