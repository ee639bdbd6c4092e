"""Room identity: channel names derived from the session id alone."""

import hashlib

CHANNEL_PREFIX = "room_"
DIGEST_HEX_CHARS = 32


def resolve_channel_name(session_id: str) -> str:
    """Return the media channel name for a live session.

    Pure function of ``session_id``: no clock, no randomness, no stored
    state, so both parties land on the same channel on every join. The
    128-bit SHA-256 prefix keeps distinct ids apart and the result within
    provider channel-name limits (ASCII, 37 characters).
    """
    digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()
    return f"{CHANNEL_PREFIX}{digest[:DIGEST_HEX_CHARS]}"
