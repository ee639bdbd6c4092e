"""Sentry error tracking configuration and initialization."""

import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from liveroom.core.logging import get_logger

logger = get_logger(__name__)

# Keys whose values must never leave the process
SENSITIVE_KEYS = ("token", "secret", "password", "authorization", "cookie")
REDACTED = "[redacted]"

_sentry_initialized = False


def init_sentry() -> None:
    """
    Initialize Sentry SDK for error tracking.

    Only initializes if SENTRY_DSN is set and looks like a URL, and only
    once per process. Performance tracing and PII are off; stdlib logging
    is not forwarded since structlog already covers it.
    """
    global _sentry_initialized

    if _sentry_initialized:
        return

    sentry_dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not sentry_dsn:
        logger.info("sentry.disabled", message="Sentry DSN not found, error tracking disabled")
        return

    # Placeholder values (e.g. "xxx" in CI) are not DSNs
    if not sentry_dsn.startswith(("https://", "http://")):
        logger.info(
            "sentry.disabled",
            message="Sentry DSN appears to be a placeholder, error tracking disabled",
        )
        return

    environment = os.getenv("ENVIRONMENT", "development")

    try:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            traces_sample_rate=0.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=scrub_event,
        )
    except BadDsn as exc:
        logger.warning(
            "sentry.init_failed",
            message="Invalid Sentry DSN, error tracking disabled",
            error=str(exc),
        )
        return

    _sentry_initialized = True
    logger.info("sentry.initialized", environment=environment)


def _scrub(value):
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_sensitive(key) else _scrub(item) for key, item in value.items()
        }
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    return value


def _is_sensitive(key) -> bool:
    key_str = str(key).lower()
    return any(marker in key_str for marker in SENSITIVE_KEYS)


def scrub_event(event: dict, hint: dict) -> dict:
    """
    Redact credentials from Sentry events.

    Room tokens and signing secrets must not reach the error tracker, so
    request data, extra context and breadcrumb data are walked and any
    key that names a token, secret, password, cookie or authorization
    header is replaced.
    """
    for section in ("request", "extra", "contexts"):
        if section in event:
            event[section] = _scrub(event[section])

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, dict) and isinstance(breadcrumbs.get("values"), list):
        for crumb in breadcrumbs["values"]:
            if isinstance(crumb, dict) and "data" in crumb:
                crumb["data"] = _scrub(crumb["data"])

    return event
