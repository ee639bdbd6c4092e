# File: src/liveroom/api/auth_helpers.py
"""Dependencies binding the authenticated caller to a live session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from liveroom.api.auth import get_current_user
from liveroom.core.authorization import PartyAccess, authorize
from liveroom.core.db import get_db
from liveroom.core.session_store import SqlAlchemyLiveSessionStore
from liveroom.models.user import User


async def get_session_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyLiveSessionStore:
    """Store bound to the request's database session."""
    return SqlAlchemyLiveSessionStore(db)


async def require_session_party(
    session_id: str,
    current_user: User = Depends(get_current_user),
    store: SqlAlchemyLiveSessionStore = Depends(get_session_store),
) -> PartyAccess:
    """Allow only the tutor or the learner of ``session_id`` through."""
    return await authorize(store, current_user.id, session_id)
