"""create registry tables

Revision ID: 3b1f7c2d9e40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f7c2d9e40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "registry_meta",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner", sa.String(length=42), nullable=False),
        sa.CheckConstraint("id = 1", name="registry_meta_singleton"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "credentials",
        sa.Column("credential_hash", sa.String(length=256), nullable=False),
        sa.Column("student_name", sa.String(length=255), nullable=False),
        sa.Column("university_name", sa.String(length=255), nullable=False),
        sa.Column("degree_type", sa.String(length=128), nullable=False),
        sa.Column("field_of_study", sa.String(length=255), nullable=False),
        sa.Column("graduation_date", sa.BigInteger(), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False),
        sa.Column("issued_at", sa.BigInteger(), nullable=False),
        sa.Column("issued_by", sa.String(length=42), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("credential_hash"),
        sa.UniqueConstraint("position"),
    )
    op.create_table(
        "authorities",
        sa.Column("identity", sa.String(length=42), nullable=False),
        sa.Column("is_authorized", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("identity"),
    )


def downgrade() -> None:
    op.drop_table("authorities")
    op.drop_table("credentials")
    op.drop_table("registry_meta")
