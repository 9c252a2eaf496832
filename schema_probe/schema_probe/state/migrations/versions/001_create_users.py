"""Create the users table.

Creates ``users`` with its original column set: ``email`` (primary key),
``username`` (unique), ``created_at``, ``birthdate`` and ``city``, plus
the email-shape and username-length check constraints.

Revision ID: 001
Revises: None
Create Date: 2025-06-01 00:00:00.000000+00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from schema_probe.state.tables import (
    EMAIL_CHECK_NAME,
    EMAIL_PATTERN,
    USERNAME_CHECK_NAME,
    USERNAME_INDEX_NAME,
)

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("birthdate", sa.Date(), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("email", name="users_pkey"),
        sa.CheckConstraint(f"email ~* '{EMAIL_PATTERN}'", name=EMAIL_CHECK_NAME),
        sa.CheckConstraint("length(username) > 3", name=USERNAME_CHECK_NAME),
    )
    op.create_index(USERNAME_INDEX_NAME, "users", ["username"], unique=True)


def downgrade() -> None:
    op.drop_index(USERNAME_INDEX_NAME, table_name="users")
    op.drop_table("users")
