"""Issuing-authority management.

Only the registry owner may add or remove authorities; anyone may list
the current authority set or ask whether an identity is authorized.  Add
and remove are idempotent, and removing an authority does not affect
credentials it already issued.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel, field_validator

from credential_registry.api.dependencies import parse_identity, require_caller
from credential_registry.api.receipts import ReceiptOut, accept_submission
from credential_registry.models.identity import normalize_address
from credential_registry.models.principal import Principal
from credential_registry.services.registry import registry

router = APIRouter(prefix="/v1/authorities", tags=["authorities"])


class AuthorityIn(BaseModel):
    identity: str

    @field_validator("identity")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_address(value)


class AuthorityOut(BaseModel):
    identity: str
    is_authority: bool
    is_owner: bool


class AuthorityListOut(BaseModel):
    items: list[AuthorityOut]


@router.post("", response_model=ReceiptOut, status_code=status.HTTP_202_ACCEPTED)
async def submit_add_authority(
    body: AuthorityIn,
    background_tasks: BackgroundTasks,
    principal: Annotated[Principal, Depends(require_caller)],
) -> ReceiptOut:
    return await accept_submission(
        background_tasks, "add_authority", principal.identity, {"identity": body.identity}
    )


@router.delete(
    "/{identity}", response_model=ReceiptOut, status_code=status.HTTP_202_ACCEPTED
)
async def submit_remove_authority(
    identity: str,
    background_tasks: BackgroundTasks,
    principal: Annotated[Principal, Depends(require_caller)],
) -> ReceiptOut:
    return await accept_submission(
        background_tasks,
        "remove_authority",
        principal.identity,
        {"identity": parse_identity(identity)},
    )


@router.get("", response_model=AuthorityListOut)
async def list_authorities() -> AuthorityListOut:
    owner = await registry.owner()
    return AuthorityListOut(
        items=[
            AuthorityOut(identity=identity, is_authority=True, is_owner=identity == owner)
            for identity in await registry.authorities()
        ]
    )


@router.get("/{identity}", response_model=AuthorityOut)
async def get_authority(identity: str) -> AuthorityOut:
    normalized = parse_identity(identity)
    return AuthorityOut(
        identity=normalized,
        is_authority=await registry.is_authority(normalized),
        is_owner=normalized == await registry.owner(),
    )
