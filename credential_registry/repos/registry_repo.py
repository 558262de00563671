"""Registry state store: credentials, authority set, issuance index, owner.

Mutations go through ``transaction()``, which yields a unit of work.  Writes
made through the unit of work are staged and only become visible when the
``async with`` block exits cleanly; an exception anywhere inside the block
discards them.  Reads outside a transaction see the last committed state.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from credential_registry.models.credential import Credential


class RegistryTransaction(Protocol):
    async def get_owner(self) -> str | None: ...
    async def set_owner(self, owner: str) -> None: ...
    async def get_credential(self, credential_hash: str) -> Credential | None: ...
    async def is_authority(self, identity: str) -> bool: ...
    async def insert_credential(self, credential: Credential) -> None: ...
    async def mark_revoked(self, credential_hash: str) -> None: ...
    async def set_authority(self, identity: str, authorized: bool) -> None: ...


class RegistryRepo(Protocol):
    def transaction(self) -> AbstractAsyncContextManager[RegistryTransaction]: ...
    async def get_owner(self) -> str | None: ...
    async def get_credential(self, credential_hash: str) -> Credential | None: ...
    async def is_authority(self, identity: str) -> bool: ...
    async def count(self) -> int: ...
    async def revoked_count(self) -> int: ...
    async def hash_at(self, index: int) -> str | None: ...
    async def list_authorities(self) -> list[str]: ...


class _InMemoryTransaction:
    def __init__(self, repo: InMemoryRegistryRepo) -> None:
        self._repo = repo
        self._staged: list[Callable[[], None]] = []
        self._staged_owner: str | None = None

    async def get_owner(self) -> str | None:
        return self._repo._owner or self._staged_owner

    async def set_owner(self, owner: str) -> None:
        if await self.get_owner() is not None:
            raise ValueError("owner already recorded")
        self._staged_owner = owner

        def _apply() -> None:
            self._repo._owner = owner

        self._staged.append(_apply)

    async def get_credential(self, credential_hash: str) -> Credential | None:
        return self._repo._credentials.get(credential_hash)

    async def is_authority(self, identity: str) -> bool:
        return self._repo._authorities.get(identity, False)

    async def insert_credential(self, credential: Credential) -> None:
        if credential.credential_hash in self._repo._credentials:
            raise ValueError("credential hash already exists")

        def _apply() -> None:
            self._repo._credentials[credential.credential_hash] = credential
            self._repo._index.append(credential.credential_hash)

        self._staged.append(_apply)

    async def mark_revoked(self, credential_hash: str) -> None:
        if credential_hash not in self._repo._credentials:
            raise KeyError("credential not found")

        def _apply() -> None:
            current = self._repo._credentials[credential_hash]
            if not current.is_revoked:
                self._repo._credentials[credential_hash] = current.revoked()
                self._repo._revoked += 1

        self._staged.append(_apply)

    async def set_authority(self, identity: str, authorized: bool) -> None:
        def _apply() -> None:
            self._repo._authorities[identity] = authorized

        self._staged.append(_apply)

    def commit(self) -> None:
        for apply in self._staged:
            apply()
        self._staged.clear()


class InMemoryRegistryRepo:
    """Process-local registry state, used when DATABASE_URL is not set.

    A single asyncio.Lock serializes transactions, giving every mutation a
    total order relative to the others.
    """

    def __init__(self) -> None:
        self._owner: str | None = None
        self._credentials: dict[str, Credential] = {}
        self._index: list[str] = []
        self._authorities: dict[str, bool] = {}
        self._revoked = 0
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[_InMemoryTransaction]:
        async with self._lock:
            tx = _InMemoryTransaction(self)
            yield tx
            tx.commit()

    def transaction(self) -> AbstractAsyncContextManager[RegistryTransaction]:
        return self._transaction()

    async def get_owner(self) -> str | None:
        return self._owner

    async def get_credential(self, credential_hash: str) -> Credential | None:
        return self._credentials.get(credential_hash)

    async def is_authority(self, identity: str) -> bool:
        return self._authorities.get(identity, False)

    async def count(self) -> int:
        return len(self._index)

    async def revoked_count(self) -> int:
        return self._revoked

    async def hash_at(self, index: int) -> str | None:
        if 0 <= index < len(self._index):
            return self._index[index]
        return None

    async def list_authorities(self) -> list[str]:
        return sorted(identity for identity, ok in self._authorities.items() if ok)

    def clear(self) -> None:
        """Drop all state, including the owner.  Test helper."""
        self._owner = None
        self._credentials.clear()
        self._index.clear()
        self._authorities.clear()
        self._revoked = 0
