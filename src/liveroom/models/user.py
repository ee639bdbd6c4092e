# File: src/liveroom/models/user.py
"""User model for authentication."""

import uuid
from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from liveroom.core.db import Base
from liveroom.utils.datetime import now_utc


class User(Base):
    """User account; may be tutor in some sessions and learner in others."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    hashed_password: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        default="",
    )

    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
    )

    @property
    def display_name(self) -> str:
        """Return the user's name, or the email when no name is set."""
        return self.name.strip() or self.email

    def __repr__(self) -> str:
        return f"<User(email={self.email}, is_active={self.is_active})>"
