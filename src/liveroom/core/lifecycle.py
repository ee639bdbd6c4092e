"""Live session lifecycle: scheduled -> in_progress -> completed.

Both transitions are single conditional writes in the store. A caller that
loses a race, or repeats a request, lands on the idempotent path instead of
failing, so join and end can always be retried from the top.
"""

from dataclasses import dataclass
from datetime import datetime

from liveroom.core.errors import NotFoundError, SessionEndedError
from liveroom.core.logging import get_logger
from liveroom.core.session_store import LiveSessionStore
from liveroom.models.enums import LiveSessionStatus, ParticipantRole, TransitionAction
from liveroom.models.live_session import LiveSession
from liveroom.utils.datetime import now_utc

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Session state after a lifecycle request."""

    session: LiveSession
    changed: bool


async def _reload(store: LiveSessionStore, session_id: str) -> LiveSession:
    session = await store.get(session_id)
    if session is None:
        raise NotFoundError("LiveSession", session_id)
    return session


async def request_join(
    store: LiveSessionStore,
    session_id: str,
    *,
    actor_id: str,
    role: ParticipantRole,
    at: datetime | None = None,
) -> TransitionResult:
    """Mark the session in progress on the first join.

    Later joins (the other party, reconnects) succeed without touching
    the recorded start time.

    Raises:
        SessionEndedError: the session is already completed
        NotFoundError: the session disappeared after authorization
    """
    changed = await store.transition(
        session_id,
        allowed_from=(LiveSessionStatus.SCHEDULED,),
        to_status=LiveSessionStatus.IN_PROGRESS,
        timestamp_field="actual_start_time",
        at=at or now_utc(),
        actor_id=actor_id,
        role=role,
        action=TransitionAction.STARTED,
    )
    session = await _reload(store, session_id)

    if changed:
        logger.info(
            "live_session.started",
            session_id=session_id,
            actor_id=actor_id,
            role=role.value,
            actual_start_time=session.actual_start_time.isoformat(),
        )
        return TransitionResult(session=session, changed=True)

    if session.status == LiveSessionStatus.COMPLETED.value:
        logger.info("live_session.join_after_end", session_id=session_id, actor_id=actor_id)
        raise SessionEndedError(session_id)

    logger.info("live_session.join_noop", session_id=session_id, actor_id=actor_id)
    return TransitionResult(session=session, changed=False)


async def request_end(
    store: LiveSessionStore,
    session_id: str,
    *,
    actor_id: str,
    role: ParticipantRole,
    at: datetime | None = None,
) -> TransitionResult:
    """Complete the session; repeated calls are no-ops.

    Allowed from scheduled as well, for a party that leaves before the
    other one ever joined.
    """
    changed = await store.transition(
        session_id,
        allowed_from=(LiveSessionStatus.SCHEDULED, LiveSessionStatus.IN_PROGRESS),
        to_status=LiveSessionStatus.COMPLETED,
        timestamp_field="actual_end_time",
        at=at or now_utc(),
        actor_id=actor_id,
        role=role,
        action=TransitionAction.COMPLETED,
    )
    session = await _reload(store, session_id)

    if changed:
        logger.info(
            "live_session.completed",
            session_id=session_id,
            actor_id=actor_id,
            role=role.value,
            actual_end_time=session.actual_end_time.isoformat(),
        )
    else:
        logger.info("live_session.end_noop", session_id=session_id, actor_id=actor_id)

    return TransitionResult(session=session, changed=changed)
