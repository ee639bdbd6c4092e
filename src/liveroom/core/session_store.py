"""Live session persistence: point lookup and atomic conditional transitions."""

from datetime import datetime
from typing import Iterable, Protocol

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from liveroom.core.errors import TransientStoreError
from liveroom.core.logging import get_logger
from liveroom.models.enums import LiveSessionStatus, ParticipantRole, TransitionAction
from liveroom.models.live_session import LiveSession
from liveroom.models.live_session_audit_log import LiveSessionAuditLog

logger = get_logger(__name__)

TIMESTAMP_FIELDS = ("actual_start_time", "actual_end_time")


class LiveSessionStore(Protocol):
    """Storage contract used by the authorization guard and lifecycle controller."""

    async def get(self, session_id: str) -> LiveSession | None:
        """Load the current state of a session, bypassing any cached copy."""
        ...

    async def transition(
        self,
        session_id: str,
        *,
        allowed_from: Iterable[LiveSessionStatus],
        to_status: LiveSessionStatus,
        timestamp_field: str,
        at: datetime,
        actor_id: str,
        role: ParticipantRole,
        action: TransitionAction,
    ) -> bool:
        """Move ``session_id`` to ``to_status`` only if its status is in ``allowed_from``.

        The timestamp column is written only when it is still empty. Returns
        True when this call applied the write, False when the precondition
        no longer held.
        """
        ...


class SqlAlchemyLiveSessionStore:
    """LiveSessionStore backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, session_id: str) -> LiveSession | None:
        stmt = (
            select(LiveSession)
            .where(LiveSession.id == session_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise await self._transient("get", session_id, exc) from exc

    async def transition(
        self,
        session_id: str,
        *,
        allowed_from: Iterable[LiveSessionStatus],
        to_status: LiveSessionStatus,
        timestamp_field: str,
        at: datetime,
        actor_id: str,
        role: ParticipantRole,
        action: TransitionAction,
    ) -> bool:
        if timestamp_field not in TIMESTAMP_FIELDS:
            raise ValueError(f"Unknown timestamp field: {timestamp_field}")

        column = getattr(LiveSession, timestamp_field)
        stmt = (
            update(LiveSession)
            .where(
                LiveSession.id == session_id,
                LiveSession.status.in_([s.value for s in allowed_from]),
            )
            .values(
                {
                    LiveSession.status: to_status.value,
                    column: func.coalesce(column, at),
                }
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            applied = result.rowcount == 1
            if applied:
                self.db.add(
                    LiveSessionAuditLog(
                        session_id=session_id,
                        changed_by=actor_id,
                        role=role.value,
                        action=action.value,
                        to_status=to_status.value,
                        changed_at=at,
                    )
                )
            # Racing callers must observe the new status after this point
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await self._transient("transition", session_id, exc) from exc

        return applied

    async def _transient(
        self, operation: str, session_id: str, exc: SQLAlchemyError
    ) -> TransientStoreError:
        try:
            await self.db.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.error(
                "session_store.rollback_failed",
                operation=operation,
                session_id=session_id,
                error=type(rollback_exc).__name__,
            )
        logger.error(
            "session_store.failure",
            operation=operation,
            session_id=session_id,
            error=type(exc).__name__,
        )
        return TransientStoreError(operation)
