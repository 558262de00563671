from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from credential_registry.core.errors import IndexOutOfRange
from credential_registry.services.registry import registry

router = APIRouter(prefix="/v1/registry", tags=["registry"])


class RegistryOut(BaseModel):
    owner: str
    total: int
    revoked: int
    active: int


class IndexEntryOut(BaseModel):
    index: int
    credential_hash: str


@router.get("", response_model=RegistryOut)
async def get_registry() -> RegistryOut:
    """Owner and credential counts.  ``total`` never decreases."""
    summary = await registry.summary()
    return RegistryOut(
        owner=summary.owner,
        total=summary.total,
        revoked=summary.revoked,
        active=summary.active,
    )


@router.get("/index/{index}", response_model=IndexEntryOut)
async def get_hash_at_index(index: int) -> IndexEntryOut:
    try:
        credential_hash = await registry.hash_at_index(index)
    except IndexOutOfRange as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from None
    return IndexEntryOut(index=index, credential_hash=credential_hash)
