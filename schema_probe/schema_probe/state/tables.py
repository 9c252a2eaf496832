"""SQLAlchemy 2.0 ORM declaration of the ``users`` table.

Uses the ``Mapped`` / ``mapped_column`` declaration style.  Column order
matters: PostgreSQL reports NOT NULL violations in column order, so the
base columns are declared before the ones added by migration ``002``.
The ``Base`` declarative base is exported for Alembic and for the
integration test fixtures.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    PrimaryKeyConstraint,
    String,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Email-shaped: local part, "@", domain containing at least one ".".
EMAIL_PATTERN = r"^[A-Za-z0-9._+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"

EMAIL_CHECK_NAME = "users_email_check"
USERNAME_CHECK_NAME = "users_username_check"
USERNAME_INDEX_NAME = "users_username_key"


class Base(DeclarativeBase):
    """Shared declarative base for the probed tables."""


class UserTable(Base):
    """Application users, keyed by email."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    birthdate: Mapped[date | None] = mapped_column(Date, nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)

    # Added by migration 002.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    last_access_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        PrimaryKeyConstraint("email", name="users_pkey"),
        CheckConstraint(f"email ~* '{EMAIL_PATTERN}'", name=EMAIL_CHECK_NAME),
        CheckConstraint("length(username) > 3", name=USERNAME_CHECK_NAME),
        Index(USERNAME_INDEX_NAME, "username", unique=True),
    )
