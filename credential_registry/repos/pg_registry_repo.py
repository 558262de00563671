"""PostgreSQL implementation of RegistryRepo."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credential_registry.db.tables import AuthorityRow, CredentialRow, RegistryMetaRow
from credential_registry.models.credential import Credential
from credential_registry.repos.registry_repo import RegistryTransaction


class _PgTransaction:
    """Unit of work bound to one open session transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_owner(self) -> str | None:
        row = await self._session.get(RegistryMetaRow, 1)
        return row.owner if row is not None else None

    async def set_owner(self, owner: str) -> None:
        # Two processes may race through genesis; the first insert wins.
        stmt = pg_insert(RegistryMetaRow).values(id=1, owner=owner)
        await self._session.execute(stmt.on_conflict_do_nothing(index_elements=["id"]))

    async def get_credential(self, credential_hash: str) -> Credential | None:
        row = await self._session.get(CredentialRow, credential_hash)
        return _row_to_credential(row) if row is not None else None

    async def is_authority(self, identity: str) -> bool:
        row = await self._session.get(AuthorityRow, identity)
        return bool(row is not None and row.is_authorized)

    async def insert_credential(self, credential: Credential) -> None:
        next_position = (
            await self._session.execute(
                select(func.coalesce(func.max(CredentialRow.position) + 1, 0))
            )
        ).scalar_one()
        self._session.add(
            CredentialRow(
                credential_hash=credential.credential_hash,
                student_name=credential.student_name,
                university_name=credential.university_name,
                degree_type=credential.degree_type,
                field_of_study=credential.field_of_study,
                graduation_date=credential.graduation_date,
                is_revoked=credential.is_revoked,
                issued_at=credential.issued_at,
                issued_by=credential.issued_by,
                position=next_position,
            )
        )
        await self._session.flush()

    async def mark_revoked(self, credential_hash: str) -> None:
        stmt = (
            update(CredentialRow)
            .where(CredentialRow.credential_hash == credential_hash)
            .values(is_revoked=True)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("credential not found")

    async def set_authority(self, identity: str, authorized: bool) -> None:
        stmt = pg_insert(AuthorityRow).values(identity=identity, is_authorized=authorized)
        await self._session.execute(
            stmt.on_conflict_do_update(
                index_elements=["identity"],
                set_={"is_authorized": authorized},
            )
        )


class PgRegistryRepo:
    """Satisfies the RegistryRepo Protocol using PostgreSQL via SQLAlchemy.

    Each transaction opens its own session, begins a database transaction
    and locks the registry_meta row, so concurrent writers (API process and
    worker processes) are applied one at a time.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[_PgTransaction]:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    select(RegistryMetaRow.id)
                    .where(RegistryMetaRow.id == 1)
                    .with_for_update()
                )
                yield _PgTransaction(session)

    def transaction(self) -> AbstractAsyncContextManager[RegistryTransaction]:
        return self._transaction()

    async def get_owner(self) -> str | None:
        async with self._session_factory() as session:
            row = await session.get(RegistryMetaRow, 1)
            return row.owner if row is not None else None

    async def get_credential(self, credential_hash: str) -> Credential | None:
        async with self._session_factory() as session:
            row = await session.get(CredentialRow, credential_hash)
            return _row_to_credential(row) if row is not None else None

    async def is_authority(self, identity: str) -> bool:
        async with self._session_factory() as session:
            row = await session.get(AuthorityRow, identity)
            return bool(row is not None and row.is_authorized)

    async def count(self) -> int:
        async with self._session_factory() as session:
            stmt = select(func.count()).select_from(CredentialRow)
            return (await session.execute(stmt)).scalar_one()

    async def revoked_count(self) -> int:
        async with self._session_factory() as session:
            stmt = (
                select(func.count())
                .select_from(CredentialRow)
                .where(CredentialRow.is_revoked.is_(True))
            )
            return (await session.execute(stmt)).scalar_one()

    async def hash_at(self, index: int) -> str | None:
        async with self._session_factory() as session:
            stmt = select(CredentialRow.credential_hash).where(
                CredentialRow.position == index
            )
            return (await session.execute(stmt)).scalar_one_or_none()

    async def list_authorities(self) -> list[str]:
        async with self._session_factory() as session:
            stmt = (
                select(AuthorityRow.identity)
                .where(AuthorityRow.is_authorized.is_(True))
                .order_by(AuthorityRow.identity)
            )
            return list((await session.execute(stmt)).scalars().all())


def _row_to_credential(row: CredentialRow) -> Credential:
    return Credential(
        credential_hash=row.credential_hash,
        student_name=row.student_name,
        university_name=row.university_name,
        degree_type=row.degree_type,
        field_of_study=row.field_of_study,
        graduation_date=row.graduation_date,
        issued_at=row.issued_at,
        issued_by=row.issued_by,
        is_revoked=row.is_revoked,
    )
