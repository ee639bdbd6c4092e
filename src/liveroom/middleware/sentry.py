"""Attach request ID and caller ID to Sentry scope for each request."""

import sentry_sdk
from starlette.types import ASGIApp, Receive, Scope, Send

from liveroom.core.logging import get_request_id


class SentryContextMiddleware:
    """
    Tag Sentry events with the request ID and the authenticated user.

    Must sit inside SessionMiddleware (so the cookie session is decoded)
    and inside RequestIDMiddleware (so the request ID is already set).
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = get_request_id()
        user_id = scope.get("session", {}).get("user_id")

        with sentry_sdk.isolation_scope() as sentry_scope:
            sentry_scope.set_tag("request_id", request_id)
            if user_id:
                sentry_scope.set_user({"id": user_id})
            sentry_scope.set_context(
                "request",
                {
                    "method": scope.get("method"),
                    "path": scope.get("path"),
                    "request_id": request_id,
                },
            )
            await self.app(scope, receive, send)
