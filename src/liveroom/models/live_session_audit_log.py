"""Audit log model for applied LiveSession status transitions."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liveroom.core.db import Base
from liveroom.utils.datetime import now_utc

if TYPE_CHECKING:
    from liveroom.models.live_session import LiveSession


class LiveSessionAuditLog(Base):
    """Immutable trail of status transitions; one row per applied write."""

    __tablename__ = "live_session_audit_logs"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    session_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("live_sessions.id"),
        nullable=False,
        index=True,
    )

    session: Mapped["LiveSession"] = relationship(
        "LiveSession",
        foreign_keys=[session_id],
    )

    # WHO
    changed_by: Mapped[str] = mapped_column(String(36), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)

    # WHEN
    changed_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    # WHAT
    action: Mapped[str] = mapped_column(String(20), nullable=False)  # "STARTED", "COMPLETED"
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<LiveSessionAuditLog(session_id={self.session_id}, "
            f"action={self.action}, changed_by={self.changed_by})>"
        )
