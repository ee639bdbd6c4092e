# File: src/liveroom/models/live_session_schemas.py
"""Pydantic schemas for the live session room API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from liveroom.models.enums import LiveSessionStatus, ParticipantRole


class RoomInfoRead(BaseModel):
    """Room details shown to a party before joining."""

    model_config = ConfigDict(from_attributes=True)

    session_id: str
    channel_name: str
    role: ParticipantRole
    is_tutor: bool
    is_learner: bool
    tutor_name: str
    learner_name: str
    title: str
    scheduled_at: datetime
    duration_minutes: int
    status: LiveSessionStatus


class JoinResponse(BaseModel):
    """Credential handed to the media client after a successful join."""

    token: str = Field(..., description="Signed room access token")
    channel_name: str
    identity: str
    role: ParticipantRole
    expires_at: datetime = Field(..., description="Token expiry (UTC)")
    server_url: str | None = Field(None, description="Media server URL for the client SDK")
    status: LiveSessionStatus


class EndResponse(BaseModel):
    """Acknowledgement for an end-call request."""

    success: Literal[True] = True
    status: LiveSessionStatus = LiveSessionStatus.COMPLETED
