"""The credential registry state machine.

Per credential:  nonexistent --issue--> active --revoke--> revoked

Rules enforced here:
  - only members of the authority set may issue
  - a credential hash can be issued once; duplicates never overwrite
  - only the recorded issuer or the owner may revoke, and only once
  - only the owner manages the authority set (add/remove are idempotent)
  - the issuance index is append-only; revocation never shrinks count()

Every mutation runs inside one repo transaction and checks all of its
preconditions before staging a write, so a raised RegistryError always
leaves state untouched.  Revocation rights come from the stored
``issued_by``; removing an authority does not take away its right to
revoke what it already issued.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from credential_registry.core.errors import (
    AlreadyRevoked,
    DuplicateCredential,
    IndexOutOfRange,
    NotFound,
    RegistryError,
    Unauthorized,
)
from credential_registry.core.metrics import REGISTRY_TRANSACTIONS, VERIFICATIONS
from credential_registry.db.engine import async_session_factory
from credential_registry.models.credential import (
    Credential,
    RegistrySummary,
    VerificationResult,
)
from credential_registry.repos.pg_registry_repo import PgRegistryRepo
from credential_registry.repos.registry_repo import (
    InMemoryRegistryRepo,
    RegistryRepo,
    RegistryTransaction,
)

logger = logging.getLogger(__name__)


def _unix_now() -> int:
    return int(time.time())


class CredentialRegistry:
    def __init__(
        self,
        repo: RegistryRepo,
        *,
        clock: Callable[[], int] = _unix_now,
    ) -> None:
        self._repo = repo
        self._clock = clock

    @property
    def repo(self) -> RegistryRepo:
        return self._repo

    # ------------------------------------------------------------------
    # Genesis
    # ------------------------------------------------------------------

    async def genesis(self, owner: str) -> str:
        """Record ``owner`` and authorize it, unless an owner already exists.

        Ownership is fixed at creation: if a different owner is already
        recorded it is kept and returned.
        """
        async with self._repo.transaction() as tx:
            existing = await tx.get_owner()
            if existing is None:
                await tx.set_owner(owner)
                # Another process may have won the race to record an owner.
                if await tx.get_owner() == owner:
                    await tx.set_authority(owner, True)

        recorded = await self._repo.get_owner()
        if recorded is None:
            raise RuntimeError("registry genesis did not record an owner")
        if existing is None and recorded == owner:
            logger.info("Registry genesis: owner=%s", owner, extra={"identity": owner})
        elif recorded != owner:
            logger.warning(
                "Configured owner %s ignored; registry is owned by %s",
                owner,
                recorded,
                extra={"identity": recorded},
            )
        return recorded

    # ------------------------------------------------------------------
    # Credential lifecycle
    # ------------------------------------------------------------------

    async def issue(
        self,
        caller: str,
        *,
        credential_hash: str,
        student_name: str,
        university_name: str,
        degree_type: str,
        field_of_study: str,
        graduation_date: int,
    ) -> Credential:
        with self._observe("issue", caller=caller, credential_hash=credential_hash):
            async with self._repo.transaction() as tx:
                if await tx.get_credential(credential_hash) is not None:
                    raise DuplicateCredential(
                        f"credential {credential_hash} already exists"
                    )
                if not await tx.is_authority(caller):
                    raise Unauthorized(f"{caller} is not an issuing authority")
                credential = Credential.new(
                    credential_hash=credential_hash,
                    student_name=student_name,
                    university_name=university_name,
                    degree_type=degree_type,
                    field_of_study=field_of_study,
                    graduation_date=graduation_date,
                    issued_at=self._clock(),
                    issued_by=caller,
                )
                await tx.insert_credential(credential)
        return credential

    async def verify(self, credential_hash: str) -> VerificationResult:
        credential = await self._repo.get_credential(credential_hash)
        result = VerificationResult(
            exists=credential is not None, credential=credential
        )
        VERIFICATIONS.labels(result=result.outcome).inc()
        return result

    async def revoke(self, caller: str, credential_hash: str) -> Credential:
        with self._observe("revoke", caller=caller, credential_hash=credential_hash):
            async with self._repo.transaction() as tx:
                credential = await tx.get_credential(credential_hash)
                if credential is None:
                    raise NotFound(f"credential {credential_hash} does not exist")
                owner = await self._require_owner(tx)
                if caller != credential.issued_by and caller != owner:
                    raise Unauthorized(
                        f"only the issuer or the owner may revoke {credential_hash}"
                    )
                if credential.is_revoked:
                    raise AlreadyRevoked(
                        f"credential {credential_hash} is already revoked"
                    )
                await tx.mark_revoked(credential_hash)
        return credential.revoked()

    # ------------------------------------------------------------------
    # Authority management
    # ------------------------------------------------------------------

    async def add_authority(self, caller: str, identity: str) -> None:
        await self._set_authority("add_authority", caller, identity, True)

    async def remove_authority(self, caller: str, identity: str) -> None:
        await self._set_authority("remove_authority", caller, identity, False)

    async def is_authority(self, identity: str) -> bool:
        return await self._repo.is_authority(identity)

    async def authorities(self) -> list[str]:
        """Current authority set, sorted by identity."""
        return await self._repo.list_authorities()

    async def _set_authority(
        self, operation: str, caller: str, identity: str, authorized: bool
    ) -> None:
        with self._observe(operation, caller=caller, identity=identity):
            async with self._repo.transaction() as tx:
                owner = await self._require_owner(tx)
                if caller != owner:
                    raise Unauthorized("only the registry owner manages authorities")
                await tx.set_authority(identity, authorized)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    async def owner(self) -> str:
        owner = await self._repo.get_owner()
        if owner is None:
            raise RuntimeError("registry has no owner; genesis has not run")
        return owner

    async def count(self) -> int:
        return await self._repo.count()

    async def hash_at_index(self, index: int) -> str:
        # Bounds are checked against count() before the store sees the index.
        if not 0 <= index < await self._repo.count():
            raise IndexOutOfRange(f"index {index} is outside the registry index")
        credential_hash = await self._repo.hash_at(index)
        if credential_hash is None:
            raise IndexOutOfRange(f"index {index} is outside the registry index")
        return credential_hash

    async def summary(self) -> RegistrySummary:
        return RegistrySummary(
            owner=await self.owner(),
            total=await self._repo.count(),
            revoked=await self._repo.revoked_count(),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _require_owner(tx: RegistryTransaction) -> str:
        owner = await tx.get_owner()
        if owner is None:
            raise RuntimeError("registry has no owner; genesis has not run")
        return owner

    @contextmanager
    def _observe(self, operation: str, *, caller: str, **context: str) -> Iterator[None]:
        extra = {"operation": operation, "caller": caller, **context}
        try:
            yield
        except RegistryError as e:
            REGISTRY_TRANSACTIONS.labels(operation=operation, outcome=e.code).inc()
            logger.warning(
                "%s rejected: %s", operation, e.message, extra={**extra, "error_code": e.code}
            )
            raise
        REGISTRY_TRANSACTIONS.labels(operation=operation, outcome="committed").inc()
        logger.info("%s committed by %s", operation, caller, extra=extra)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if async_session_factory is not None:
    registry_repo: RegistryRepo = PgRegistryRepo(async_session_factory)
else:
    registry_repo = InMemoryRegistryRepo()

registry = CredentialRegistry(registry_repo)
