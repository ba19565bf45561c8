"""Bearer token generation."""

import secrets

from moodmeter_server.core.config import settings


def generate_token(nbytes: int | None = None) -> str:
    """Generate an opaque bearer token.

    Args:
        nbytes: Random bytes to draw (defaults to ``settings.token_bytes``)

    Returns:
        URL-safe base64 token, e.g. 64 characters for 48 bytes
    """
    return secrets.token_urlsafe(nbytes or settings.token_bytes)
