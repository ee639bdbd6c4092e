# File: src/liveroom/api/live_session.py
"""Live session room endpoints (room info, join, end)."""

from fastapi import APIRouter, Depends

from liveroom.api.auth_helpers import get_session_store, require_session_party
from liveroom.core.authorization import PartyAccess
from liveroom.core.credentials import CredentialIssuer, get_credential_issuer
from liveroom.core.lifecycle import request_end, request_join
from liveroom.core.rooms import resolve_channel_name
from liveroom.core.session_store import SqlAlchemyLiveSessionStore
from liveroom.models import EndResponse, JoinResponse, ParticipantRole, RoomInfoRead

router = APIRouter(prefix="/live-sessions", tags=["live-sessions"])


@router.get("/{session_id}/room", response_model=RoomInfoRead)
async def get_room(
    session_id: str,
    access: PartyAccess = Depends(require_session_party),
):
    """Room details for the caller's pre-join screen."""
    session = access.session
    return RoomInfoRead(
        session_id=session.id,
        channel_name=resolve_channel_name(session.id),
        role=access.role,
        is_tutor=access.role == ParticipantRole.TUTOR,
        is_learner=access.role == ParticipantRole.LEARNER,
        tutor_name=session.tutor.display_name,
        learner_name=session.learner_name,
        title=session.display_title,
        scheduled_at=session.scheduled_at,
        duration_minutes=session.duration_minutes,
        status=session.status,
    )


@router.post("/{session_id}/join", response_model=JoinResponse)
async def join_session(
    session_id: str,
    access: PartyAccess = Depends(require_session_party),
    issuer: CredentialIssuer = Depends(get_credential_issuer),
    store: SqlAlchemyLiveSessionStore = Depends(get_session_store),
):
    """Start (or rejoin) the session and mint a room credential.

    The issuer dependency is resolved before any state change, so a
    misconfigured deployment fails without touching the session.
    """
    result = await request_join(
        store,
        session_id,
        actor_id=access.caller_id,
        role=access.role,
    )

    channel_name = resolve_channel_name(session_id)
    credential = issuer.issue(
        channel_name,
        access.role,
        identity=access.caller_id,
        display_name=_display_name(access),
    )

    return JoinResponse(
        token=credential.token,
        channel_name=credential.channel_name,
        identity=credential.identity,
        role=credential.role,
        expires_at=credential.expires_at,
        server_url=credential.server_url,
        status=result.session.status,
    )


@router.post("/{session_id}/end", response_model=EndResponse)
async def end_session(
    session_id: str,
    access: PartyAccess = Depends(require_session_party),
    store: SqlAlchemyLiveSessionStore = Depends(get_session_store),
):
    """Mark the session completed. Safe to call from both parties."""
    result = await request_end(
        store,
        session_id,
        actor_id=access.caller_id,
        role=access.role,
    )
    return EndResponse(status=result.session.status)


def _display_name(access: PartyAccess) -> str:
    if access.role == ParticipantRole.TUTOR:
        return access.session.tutor.display_name
    return access.session.learner_name
