"""Domain models package."""

from liveroom.models.enums import LiveSessionStatus, ParticipantRole, TransitionAction
from liveroom.models.live_session import LiveSession
from liveroom.models.live_session_audit_log import LiveSessionAuditLog
from liveroom.models.live_session_schemas import EndResponse, JoinResponse, RoomInfoRead
from liveroom.models.user import User

__all__ = [
    "EndResponse",
    "JoinResponse",
    "LiveSession",
    "LiveSessionAuditLog",
    "LiveSessionStatus",
    "ParticipantRole",
    "RoomInfoRead",
    "TransitionAction",
    "User",
]
