"""Tests for live session lifecycle transitions."""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from liveroom.core.authorization import authorize
from liveroom.core.errors import NotFoundError, SessionEndedError, TransientStoreError
from liveroom.core.lifecycle import request_end, request_join
from liveroom.core.rooms import resolve_channel_name
from liveroom.core.session_store import SqlAlchemyLiveSessionStore
from liveroom.models.enums import LiveSessionStatus, ParticipantRole, TransitionAction
from tests.conftest import load_audit_rows, load_live_session
from tests.factories import LiveSessionFactory

T0 = datetime(2026, 10, 19, 15, 2, 11)
T1 = datetime(2026, 10, 19, 15, 58, 40)
T2 = datetime(2026, 10, 19, 16, 5, 0)


@pytest.fixture
def store(db_session: AsyncSession) -> SqlAlchemyLiveSessionStore:
    return SqlAlchemyLiveSessionStore(db_session)


class TestRequestJoin:
    """scheduled -> in_progress on first join only."""

    @pytest.mark.asyncio
    async def test_first_join_starts_session(self, store, live_session, tutor, session_factory):
        result = await request_join(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T0
        )

        assert result.changed is True
        assert result.session.status == LiveSessionStatus.IN_PROGRESS.value
        assert result.session.actual_start_time == T0

        stored = await load_live_session(session_factory, live_session.id)
        assert stored.status == "in_progress"
        assert stored.actual_start_time == T0

    @pytest.mark.asyncio
    async def test_second_join_keeps_start_time(
        self, store, live_session, tutor, learner, session_factory
    ):
        await request_join(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T0
        )
        result = await request_join(
            store, live_session.id, actor_id=learner.id, role=ParticipantRole.LEARNER, at=T1
        )

        assert result.changed is False
        assert result.session.status == "in_progress"
        assert result.session.actual_start_time == T0

        audit = await load_audit_rows(session_factory, live_session.id)
        assert [row.action for row in audit] == [TransitionAction.STARTED.value]
        assert audit[0].changed_by == tutor.id
        assert audit[0].role == "tutor"

    @pytest.mark.asyncio
    async def test_rejoin_by_same_party_is_noop(self, store, live_session, learner):
        first = await request_join(
            store, live_session.id, actor_id=learner.id, role=ParticipantRole.LEARNER, at=T0
        )
        again = await request_join(
            store, live_session.id, actor_id=learner.id, role=ParticipantRole.LEARNER, at=T1
        )

        assert first.changed is True
        assert again.changed is False
        assert again.session.actual_start_time == T0

    @pytest.mark.asyncio
    async def test_join_after_completion_fails(self, store, db_session, tutor, learner):
        completed = await LiveSessionFactory.create(
            db_session,
            tutor_id=tutor.id,
            learner_id=learner.id,
            status=LiveSessionStatus.COMPLETED.value,
            actual_start_time=T0,
            actual_end_time=T1,
        )

        with pytest.raises(SessionEndedError) as exc_info:
            await request_join(
                store, completed.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T2
            )

        assert exc_info.value.code == "SESSION_ENDED"
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_join_unknown_session(self, store, tutor):
        with pytest.raises(NotFoundError):
            await request_join(store, "missing", actor_id=tutor.id, role=ParticipantRole.TUTOR)


class TestRequestEnd:
    """-> completed, once."""

    @pytest.mark.asyncio
    async def test_end_twice_keeps_first_end_time(
        self, store, live_session, tutor, learner, session_factory
    ):
        await request_join(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T0
        )

        first = await request_end(
            store, live_session.id, actor_id=learner.id, role=ParticipantRole.LEARNER, at=T1
        )
        second = await request_end(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T2
        )

        assert first.changed is True
        assert second.changed is False
        assert second.session.status == "completed"
        assert second.session.actual_end_time == T1
        assert second.session.actual_start_time == T0

        audit = await load_audit_rows(session_factory, live_session.id)
        assert [row.action for row in audit] == ["STARTED", "COMPLETED"]
        assert audit[1].changed_by == learner.id

    @pytest.mark.asyncio
    async def test_end_before_anyone_joined(self, store, live_session, tutor):
        result = await request_end(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T1
        )

        assert result.changed is True
        assert result.session.status == "completed"
        assert result.session.actual_start_time is None
        assert result.session.actual_end_time == T1

    @pytest.mark.asyncio
    async def test_status_never_moves_backward(self, store, live_session, tutor):
        await request_end(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T1
        )

        with pytest.raises(SessionEndedError):
            await request_join(
                store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T2
            )

        stored = await store.get(live_session.id)
        assert stored.status == "completed"
        assert stored.actual_start_time is None


class TestScenario:
    """Tutor joins, learner joins, learner ends, tutor tries to rejoin."""

    @pytest.mark.asyncio
    async def test_full_session_walkthrough(self, store, live_session, tutor, learner):
        joined = await request_join(
            store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR, at=T0
        )
        assert joined.session.status == "in_progress"

        second = await request_join(
            store, live_session.id, actor_id=learner.id, role=ParticipantRole.LEARNER, at=T1
        )
        assert second.session.actual_start_time == T0

        ended = await request_end(
            store, live_session.id, actor_id=learner.id, role=ParticipantRole.LEARNER, at=T2
        )
        assert ended.session.status == "completed"
        assert ended.session.actual_end_time == T2

        with pytest.raises(SessionEndedError):
            await request_join(
                store, live_session.id, actor_id=tutor.id, role=ParticipantRole.TUTOR
            )


class TestConcurrency:
    """Racing parties produce one write and two successes."""

    @pytest.mark.asyncio
    async def test_concurrent_joins_write_once(
        self, session_factory, live_session, tutor, learner
    ):
        async def join(user):
            async with session_factory() as db:
                store = SqlAlchemyLiveSessionStore(db)
                access = await authorize(store, user.id, live_session.id)
                result = await request_join(
                    store, live_session.id, actor_id=user.id, role=access.role
                )
                return result, resolve_channel_name(live_session.id)

        (first, first_channel), (second, second_channel) = await asyncio.gather(
            join(tutor), join(learner)
        )

        assert first_channel == second_channel
        assert sorted([first.changed, second.changed]) == [False, True]
        assert first.session.status == second.session.status == "in_progress"
        assert first.session.actual_start_time == second.session.actual_start_time

        audit = await load_audit_rows(session_factory, live_session.id)
        assert len(audit) == 1

    @pytest.mark.asyncio
    async def test_concurrent_ends_write_once(
        self, session_factory, live_session, tutor, learner
    ):
        async def end(user, role):
            async with session_factory() as db:
                return await request_end(
                    SqlAlchemyLiveSessionStore(db), live_session.id, actor_id=user.id, role=role
                )

        results = await asyncio.gather(
            end(tutor, ParticipantRole.TUTOR), end(learner, ParticipantRole.LEARNER)
        )

        assert sorted(r.changed for r in results) == [False, True]
        assert results[0].session.actual_end_time == results[1].session.actual_end_time

        audit = await load_audit_rows(session_factory, live_session.id)
        assert [row.action for row in audit] == ["COMPLETED"]


class TestStoreFailures:
    """Storage faults surface as retriable errors and leave no partial state."""

    @pytest.mark.asyncio
    async def test_failed_write_is_transient(
        self, store, live_session, tutor, session_factory
    ):
        session_id, tutor_id = live_session.id, tutor.id
        failure = OperationalError("UPDATE live_sessions", {}, Exception("database is locked"))

        with patch.object(AsyncSession, "execute", AsyncMock(side_effect=failure)):
            with pytest.raises(TransientStoreError) as exc_info:
                await request_join(
                    store, session_id, actor_id=tutor_id, role=ParticipantRole.TUTOR
                )

        assert exc_info.value.status_code == 503
        assert exc_info.value.to_response().retriable is True

        stored = await load_live_session(session_factory, session_id)
        assert stored.status == "scheduled"
        assert stored.actual_start_time is None
        assert await load_audit_rows(session_factory, session_id) == []

    @pytest.mark.asyncio
    async def test_retry_after_failure_succeeds(self, store, live_session, tutor):
        session_id, tutor_id = live_session.id, tutor.id
        failure = OperationalError("SELECT", {}, Exception("connection reset"))

        with patch.object(AsyncSession, "execute", AsyncMock(side_effect=failure)):
            with pytest.raises(TransientStoreError):
                await authorize(store, tutor_id, session_id)

        access = await authorize(store, tutor_id, session_id)
        result = await request_join(
            store, session_id, actor_id=tutor_id, role=access.role, at=T0
        )

        assert result.changed is True
        assert result.session.actual_start_time == T0

    @pytest.mark.asyncio
    async def test_failed_rollback_still_reports_transient(self, store, live_session, tutor):
        session_id, tutor_id = live_session.id, tutor.id
        failure = OperationalError("UPDATE live_sessions", {}, Exception("server closed"))
        dead = OperationalError("ROLLBACK", {}, Exception("connection is closed"))

        with (
            patch.object(AsyncSession, "execute", AsyncMock(side_effect=failure)),
            patch.object(AsyncSession, "rollback", AsyncMock(side_effect=dead)),
        ):
            with pytest.raises(TransientStoreError) as exc_info:
                await request_join(
                    store, session_id, actor_id=tutor_id, role=ParticipantRole.TUTOR
                )

        assert exc_info.value.code == "STORE_UNAVAILABLE"
        assert exc_info.value.details == {"operation": "transition"}

    @pytest.mark.asyncio
    async def test_unknown_timestamp_field_rejected(self, store, live_session, tutor):
        with pytest.raises(ValueError):
            await store.transition(
                live_session.id,
                allowed_from=(LiveSessionStatus.SCHEDULED,),
                to_status=LiveSessionStatus.IN_PROGRESS,
                timestamp_field="created_at",
                at=T0,
                actor_id=tutor.id,
                role=ParticipantRole.TUTOR,
                action=TransitionAction.STARTED,
            )
