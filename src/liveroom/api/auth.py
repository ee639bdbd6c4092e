"""Cookie-session login and the authenticated-caller dependency."""

import os
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from liveroom.core.db import get_db
from liveroom.core.errors import TransientStoreError
from liveroom.core.logging import get_logger
from liveroom.core.security import check_password
from liveroom.models.user import User
from liveroom.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])

DEFAULT_INACTIVITY_TIMEOUT_SECONDS = 2 * 60 * 60


def inactivity_timeout() -> timedelta:
    """Idle time after which the cookie session is discarded."""
    seconds = int(
        os.getenv("SESSION_INACTIVITY_TIMEOUT_SECONDS", str(DEFAULT_INACTIVITY_TIMEOUT_SECONDS))
    )
    return timedelta(seconds=seconds)


def _not_authenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
    )


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency to get the authenticated user from the cookie session."""
    user_id = request.session.get("user_id")
    if not user_id:
        raise _not_authenticated("Not authenticated")

    now = now_utc()
    last_activity_raw = request.session.get("last_activity")
    try:
        last_activity = datetime.fromisoformat(last_activity_raw) if last_activity_raw else None
    except (ValueError, TypeError):
        last_activity = None

    if last_activity and (now - last_activity) > inactivity_timeout():
        request.session.clear()
        logger.info(
            "auth.session_expired",
            user_id=user_id,
            idle_seconds=round((now - last_activity).total_seconds(), 2),
        )
        raise _not_authenticated("Session expired")

    request.session["last_activity"] = now.isoformat()

    stmt = select(User).where((User.id == user_id) & (User.is_active))
    try:
        result = await db.execute(stmt)
        user = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.error("auth.user_lookup_failed", user_id=user_id, error=type(exc).__name__)
        raise TransientStoreError("get_current_user") from exc

    if not user:
        raise _not_authenticated("User not found or inactive")

    return user


@router.post("/login")
async def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Validate credentials and start a cookie session."""
    email = form_data.username.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    valid, upgraded_hash = (False, None)
    if user:
        valid, upgraded_hash = check_password(form_data.password, user.hashed_password)

    if not valid:
        logger.warning("auth.login_failed", email=email)
        raise _not_authenticated("Invalid email or password")

    if not user.is_active:
        logger.warning("auth.login_disabled_account", user_id=user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled",
        )

    if upgraded_hash:
        user.hashed_password = upgraded_hash

    request.session["user_id"] = user.id
    request.session["last_activity"] = now_utc().isoformat()

    logger.info("auth.login_success", user_id=user.id)
    return {"user_id": user.id, "display_name": user.display_name}


@router.post("/logout")
async def logout(request: Request):
    """Clear the cookie session."""
    user_id = request.session.get("user_id")
    if user_id:
        logger.info("auth.logout", user_id=user_id)

    request.session.clear()
    return {"success": True}


@router.get("/logout")
async def logout_get(request: Request):
    """Logout GET endpoint for browser compatibility."""
    return await logout(request)
