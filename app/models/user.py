"""
User model — an administrative account and its lifecycle state.

Lifecycle (status only ever moves forward):

    REQUEST ──approve──▶ IN_ACTIVE ──activate──▶ ACTIVE
                             ▲
    admin create ────────────┘   (SUPERUSER accounts start at ACTIVE)

  - REQUEST: self-service signup awaiting approval. No password, no code.
  - IN_ACTIVE: approved or admin-created; holds a verification code that
    the owner trades for a password.
  - ACTIVE: password set, account usable.

Deletion is a hard delete, not a status.

Storage-level rules:
  - email is UNIQUE across every status, so two concurrent signups for the
    same address cannot both be inserted.
  - a partial unique index on role admits at most one SUPERUSER row, which
    makes the startup bootstrap safe when several processes start at once.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Enum, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class UserRole(str, enum.Enum):
    """
    Closed set of roles. Stored by member name (USER, MANAGER, SUPERUSER).

    Inherits from str so the value serializes naturally to JSON.
    """
    USER = "user"
    MANAGER = "manager"
    SUPERUSER = "superuser"


class UserStatus(str, enum.Enum):
    REQUEST = "request"
    IN_ACTIVE = "in_active"
    ACTIVE = "active"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index(
            "uq_users_single_superuser",
            "role",
            unique=True,
            sqlite_where=text("role = 'SUPERUSER'"),
            postgresql_where=text("role = 'SUPERUSER'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Argon2id hash; NULL until the account is activated (or created with one)
    hashed_password: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        default=UserRole.USER,
        nullable=False,
    )

    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus),
        default=UserStatus.REQUEST,
        nullable=False,
    )

    # Bearer token for activation; looked up directly, hence the index
    verification_code: Mapped[str | None] = mapped_column(
        String(64),
        unique=True,
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    carts: Mapped[list["Cart"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
