"""Add profile, credential and activity fields to users.

Adds ``updated_at`` (NOT NULL, default ``now()``), ``first_name`` and
``last_name`` (``varchar(50)`` NOT NULL), ``password`` (``varchar(255)``
NOT NULL), ``enabled`` (NOT NULL, default ``true``) and the nullable
``last_access_time``.

The six ``ADD COLUMN`` statements run inside the single transaction env.py
opens around the upgrade.  PostgreSQL DDL is transactional, so a failure
on any column (``first_name`` NOT NULL on a populated table, for one)
leaves the table without any of them.

Revision ID: 002
Revises: 001
Create Date: 2025-06-07 20:06:13.000000+00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "users",
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.add_column(
        "users",
        sa.Column("first_name", sa.String(50), nullable=False),
    )
    op.add_column(
        "users",
        sa.Column("last_name", sa.String(50), nullable=False),
    )
    op.add_column(
        "users",
        sa.Column("password", sa.String(255), nullable=False),
    )
    op.add_column(
        "users",
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.add_column(
        "users",
        sa.Column("last_access_time", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("users", "last_access_time")
    op.drop_column("users", "enabled")
    op.drop_column("users", "password")
    op.drop_column("users", "last_name")
    op.drop_column("users", "first_name")
    op.drop_column("users", "updated_at")
