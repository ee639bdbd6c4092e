# File: src/liveroom/models/live_session.py
"""LiveSession model: one scheduled tutor/learner engagement."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from liveroom.models.user import User

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from liveroom.core.db import Base
from liveroom.models.enums import LiveSessionStatus, ParticipantRole
from liveroom.utils.datetime import now_utc

DEFAULT_TITLE = "Live Session"
DEFAULT_LEARNER_NAME = "Learner"


class LiveSession(Base):
    """Scheduled 1:1 session between a tutor and a learner."""

    __tablename__ = "live_sessions"
    __table_args__ = (
        CheckConstraint("tutor_id <> learner_id", name="ck_live_sessions_distinct_parties"),
        CheckConstraint(
            "status IN ('scheduled', 'in_progress', 'completed')",
            name="ck_live_sessions_status",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    tutor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    tutor: Mapped["User"] = relationship(
        "User",
        foreign_keys=[tutor_id],
        lazy="selectin",
    )

    learner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    learner: Mapped["User"] = relationship(
        "User",
        foreign_keys=[learner_id],
        lazy="selectin",
    )

    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Schedule
    scheduled_at: Mapped[datetime] = mapped_column(nullable=False, index=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    # Minor currency units
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=LiveSessionStatus.SCHEDULED.value,
        index=True,
    )

    # Written once each, by the lifecycle controller only
    actual_start_time: Mapped[datetime | None] = mapped_column(nullable=True)
    actual_end_time: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    @validates("tutor_id", "learner_id")
    def _validate_party(self, key: str, value: str) -> str:
        """Parties are fixed once assigned and must be two different users."""
        if not value:
            raise ValueError(f"{key} is required")
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError(f"{key} cannot change after creation")
        other_key = "learner_id" if key == "tutor_id" else "tutor_id"
        if self.__dict__.get(other_key) == value:
            raise ValueError("tutor and learner must be different users")
        return value

    def role_of(self, user_id: str) -> ParticipantRole | None:
        """Return which party ``user_id`` is, or None for outsiders."""
        if user_id == self.tutor_id:
            return ParticipantRole.TUTOR
        if user_id == self.learner_id:
            return ParticipantRole.LEARNER
        return None

    @property
    def display_title(self) -> str:
        return self.title or DEFAULT_TITLE

    @property
    def learner_name(self) -> str:
        if self.learner is None:
            return DEFAULT_LEARNER_NAME
        return self.learner.display_name or DEFAULT_LEARNER_NAME

    def __repr__(self) -> str:
        return (
            f"<LiveSession(id={self.id}, tutor_id={self.tutor_id}, "
            f"learner_id={self.learner_id}, status={self.status})>"
        )
