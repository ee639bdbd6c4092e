"""Authorization guard: only the two parties of a session may act on it."""

from dataclasses import dataclass

from liveroom.core.errors import ForbiddenError, NotFoundError
from liveroom.core.logging import get_logger
from liveroom.core.session_store import LiveSessionStore
from liveroom.models.enums import ParticipantRole
from liveroom.models.live_session import LiveSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class PartyAccess:
    """A caller's verified access to one live session."""

    session: LiveSession
    role: ParticipantRole
    caller_id: str


async def authorize(store: LiveSessionStore, caller_id: str, session_id: str) -> PartyAccess:
    """Resolve the caller's role in a session or reject.

    Read-only. Must run on every privileged request; results are never
    cached because parties or the session itself may change between calls.

    Raises:
        NotFoundError: no session with this id
        ForbiddenError: caller is neither the tutor nor the learner
    """
    session = await store.get(session_id)
    if session is None:
        raise NotFoundError("LiveSession", session_id)

    role = session.role_of(caller_id)
    if role is None:
        logger.warning(
            "live_session.access_denied",
            session_id=session_id,
            caller_id=caller_id,
        )
        raise ForbiddenError("You are not a participant of this session")

    return PartyAccess(session=session, role=role, caller_id=caller_id)
