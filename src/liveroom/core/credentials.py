"""Room access credentials: short-lived, single-room LiveKit-style JWTs."""

import json
import os
import uuid
from datetime import datetime, timedelta

import jwt
from pydantic import BaseModel

from liveroom.core.errors import ConfigurationError
from liveroom.core.logging import get_logger
from liveroom.models.enums import ParticipantRole
from liveroom.utils.datetime import now_utc, to_epoch_seconds

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 3600
SIGNING_ALGORITHM = "HS256"


class RoomCredential(BaseModel):
    """A freshly minted credential; never persisted."""

    token: str
    channel_name: str
    identity: str
    role: ParticipantRole
    expires_at: datetime
    server_url: str | None = None


class CredentialIssuer:
    """
    Mints access tokens for the media server.

    Tokens follow the LiveKit access-token layout: the API key is the
    issuer, the participant identity the subject, and a ``video`` grant
    pins the token to exactly one room.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        server_url: str | None = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        if not api_key or not api_secret:
            raise ConfigurationError("LiveKit API key/secret not configured")
        if ttl_seconds <= 0:
            raise ConfigurationError(f"Token TTL must be positive, got {ttl_seconds}")

        self.api_key = api_key
        self.api_secret = api_secret
        self.server_url = server_url
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_env(cls) -> "CredentialIssuer":
        """Build an issuer from LIVEKIT_* environment variables."""
        ttl_raw = os.getenv("ROOM_TOKEN_TTL_SECONDS", str(DEFAULT_TTL_SECONDS))
        try:
            ttl_seconds = int(ttl_raw)
        except ValueError:
            raise ConfigurationError(f"ROOM_TOKEN_TTL_SECONDS is not an integer: {ttl_raw!r}")

        return cls(
            api_key=os.getenv("LIVEKIT_API_KEY", ""),
            api_secret=os.getenv("LIVEKIT_API_SECRET", ""),
            server_url=os.getenv("LIVEKIT_URL") or None,
            ttl_seconds=ttl_seconds,
        )

    def issue(
        self,
        channel_name: str,
        role: ParticipantRole,
        identity: str,
        display_name: str | None = None,
    ) -> RoomCredential:
        """Mint a new token for ``identity`` on ``channel_name``.

        Every call produces a distinct token (fresh ``jti``), valid for
        ``ttl_seconds`` from now. There is no renewal; callers join again.
        """
        issued_at = now_utc()
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)

        payload = {
            "iss": self.api_key,
            "sub": identity,
            "name": display_name or identity,
            "jti": uuid.uuid4().hex,
            "iat": to_epoch_seconds(issued_at),
            "nbf": to_epoch_seconds(issued_at),
            "exp": to_epoch_seconds(expires_at),
            "metadata": json.dumps({"role": role.value}),
            "video": {
                "room": channel_name,
                "roomJoin": True,
                "canPublish": True,
                "canSubscribe": True,
                "canPublishData": True,
            },
        }

        try:
            token = jwt.encode(payload, self.api_secret, algorithm=SIGNING_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Token signing failed: {type(exc).__name__}") from exc

        logger.info(
            "credential.issued",
            channel_name=channel_name,
            identity=identity,
            role=role.value,
            expires_at=expires_at.isoformat(),
        )

        return RoomCredential(
            token=token,
            channel_name=channel_name,
            identity=identity,
            role=role,
            expires_at=expires_at,
            server_url=self.server_url,
        )


def get_credential_issuer() -> CredentialIssuer:
    """FastAPI dependency: issuer from the current environment."""
    return CredentialIssuer.from_env()
