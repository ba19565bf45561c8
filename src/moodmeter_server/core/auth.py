"""Identity resolution for incoming requests.

Two modes:
1. Self only: the bearer token must belong to a user.
2. Subject or self: an optional ``user`` path parameter names a public
   user to read; without it the bearer token is used.

A username that does not match the username pattern is rejected outright
rather than falling back to the token.
"""

import logging
import re
from typing import Any

from litestar import Request
from litestar.connection import ASGIConnection
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.exceptions import AuthenticationFailure, AuthorizationDenied
from moodmeter_server.models.user import User

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"[a-z0-9_-]{3,32}")

# Path parameter naming the subject on subject-or-self routes
SUBJECT_PATH_PARAM = "user"


def is_valid_username(username: str) -> bool:
    """Check a username against the allowed pattern.

    Args:
        username: Candidate username

    Returns:
        True if the whole string is 3-32 chars of ``a-z``, ``0-9``, ``_`` or ``-``
    """
    return USERNAME_PATTERN.fullmatch(username) is not None


def extract_token(connection: ASGIConnection[Any, Any, Any, Any]) -> str | None:
    """Extract the bearer token from the Authorization header.

    Accepts ``Authorization: Bearer <token>`` as well as a bare token.

    Args:
        connection: The ASGI connection

    Returns:
        The token or None if the header is missing or empty
    """
    auth_header = connection.headers.get("Authorization", "").strip()
    if auth_header.startswith("Bearer "):
        auth_header = auth_header[7:].strip()
    return auth_header or None


async def get_user_by_token(token: str, session: AsyncSession) -> User | None:
    """Look up the user owning a token."""
    result = await session.execute(select(User).where(User.token == token))
    return result.scalar_one_or_none()


async def get_public_user(username: str, session: AsyncSession) -> User | None:
    """Look up a user by name, only if both profile and history are public."""
    result = await session.execute(
        select(User).where(
            User.username == username,
            User.is_profile_private == False,  # noqa: E712
            User.is_history_private == False,  # noqa: E712
        )
    )
    return result.scalar_one_or_none()


async def resolve_self(token: str | None, session: AsyncSession) -> User:
    """Resolve the user authenticated by a bearer token.

    Args:
        token: Presented bearer token
        session: Database session

    Returns:
        The token's owner

    Raises:
        AuthenticationFailure: If the token is missing or unknown
    """
    if not token:
        raise AuthenticationFailure()

    user = await get_user_by_token(token, session)
    if user is None:
        logger.warning("Unknown bearer token presented")
        raise AuthenticationFailure()

    return user


async def resolve_subject(username: str | None, token: str | None, session: AsyncSession) -> User:
    """Resolve the subject of a read: a public user by name, or the caller.

    Args:
        username: Username from the path, if any
        token: Presented bearer token
        session: Database session

    Returns:
        The subject user

    Raises:
        AuthorizationDenied: If the named user is malformed, unknown or private
        AuthenticationFailure: If no name is given and the token is missing or unknown
    """
    if username is None:
        return await resolve_self(token, session)

    if not is_valid_username(username):
        raise AuthorizationDenied()

    user = await get_public_user(username, session)
    if user is None:
        raise AuthorizationDenied()

    return user


async def provide_self_user(request: Request[Any, Any, Any], session: AsyncSession) -> User:
    """Litestar dependency resolving the authenticated caller."""
    return await resolve_self(extract_token(request), session)


async def provide_subject_user(request: Request[Any, Any, Any], session: AsyncSession) -> User:
    """Litestar dependency resolving the named public user or the caller."""
    username = request.path_params.get(SUBJECT_PATH_PARAM)
    return await resolve_subject(username, extract_token(request), session)
