"""SQLAlchemy table definitions for registry state.

These map to the frozen dataclasses in credential_registry/models/; the
Pg repo converts between rows and domain objects.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from credential_registry.db.engine import Base


class RegistryMetaRow(Base):
    """Single-row table holding the owner.

    Writers lock this row (SELECT ... FOR UPDATE) to serialize mutations.
    """

    __tablename__ = "registry_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    owner: Mapped[str] = mapped_column(String(42), nullable=False)

    __table_args__ = (CheckConstraint("id = 1", name="registry_meta_singleton"),)


class CredentialRow(Base):
    __tablename__ = "credentials"

    credential_hash: Mapped[str] = mapped_column(String(256), primary_key=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    university_name: Mapped[str] = mapped_column(String(255), nullable=False)
    degree_type: Mapped[str] = mapped_column(String(128), nullable=False)
    field_of_study: Mapped[str] = mapped_column(String(255), nullable=False)
    graduation_date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    issued_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    issued_by: Mapped[str] = mapped_column(String(42), nullable=False)
    # Issuance order, 0-based and gapless (assigned under the meta row lock).
    position: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)


class AuthorityRow(Base):
    __tablename__ = "authorities"

    identity: Mapped[str] = mapped_column(String(42), primary_key=True)
    is_authorized: Mapped[bool] = mapped_column(Boolean, nullable=False)
