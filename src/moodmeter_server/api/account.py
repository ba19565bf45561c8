"""Account endpoints for the authenticated user."""

from typing import Any

from litestar import Router, delete, get, patch
from litestar.di import Provide
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.auth import provide_self_user
from moodmeter_server.models.user import User
from moodmeter_server.schemas import PasswordConfirmRequest, ProfileUpdateRequest, parse_body
from moodmeter_server.services.account import AccountService


@get("/me", status_code=HTTP_200_OK)
async def get_me(current_user: User, session: AsyncSession) -> dict[str, Any]:
    """Get the caller's profile and settings.

    ``settings.is_history_private`` is the effective value: a private
    profile always reports private history.
    """
    return {"status": "ok", **AccountService(session).profile(current_user)}


@patch("/me", status_code=HTTP_200_OK)
async def update_me(
    current_user: User,
    session: AsyncSession,
    data: Any = None,
) -> dict[str, str]:
    """Update username, password and privacy flags.

    Changing the username or password requires ``confirm_password``.
    A password change also issues a new bearer token.

    Example:
        PATCH /me {"is_history_private": true}
    """
    body = parse_body(ProfileUpdateRequest, data, "Invalid profile update")
    await AccountService(session).update_profile(current_user, body.to_changes())
    return {"status": "ok"}


@delete("/me", status_code=HTTP_200_OK)
async def delete_me(
    current_user: User,
    session: AsyncSession,
    data: Any = None,
) -> dict[str, str]:
    """Delete the caller's account and all of its mood samples."""
    body = parse_body(PasswordConfirmRequest, data, "Missing `password` body field")
    await AccountService(session).delete_account(current_user, body.password)
    return {"status": "ok"}


account_router = Router(
    path="/",
    dependencies={"current_user": Provide(provide_self_user)},
    route_handlers=[get_me, update_me, delete_me],
    tags=["Account"],
)
