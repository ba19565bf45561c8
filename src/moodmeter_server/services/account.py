"""Account maintenance: profile, settings and deletion."""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.auth import is_valid_username
from moodmeter_server.core.exceptions import (
    AuthenticationFailure,
    ConflictError,
    ValidationError,
)
from moodmeter_server.core.password import hash_password, verify_password
from moodmeter_server.core.security import generate_token
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User

logger = structlog.get_logger()

PASSWORD_MISMATCH = "Passwords do not match"


@dataclass(frozen=True)
class ProfileChanges:
    """Requested profile changes; None means unchanged."""

    username: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None
    is_profile_private: bool | None = None
    is_history_private: bool | None = None

    @property
    def needs_confirmation(self) -> bool:
        """Username and password changes require the current password."""
        return self.username is not None or self.new_password is not None


class AccountService:
    """Profile reads and account-level writes."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize account service.

        Args:
            session: Database session
        """
        self.session = session
        self.logger = logger.bind(service="account")

    def profile(self, user: User) -> dict[str, Any]:
        """Build the profile and settings snapshot of a user."""
        return {
            "username": user.username,
            "created_at": user.created_at.isoformat(),
            "total_mood_changes": user.stats_mood_sets,
            "settings": {
                "custom_mood_labels": user.custom_labels,
                "custom_colors": user.custom_colors,
                "is_profile_private": user.is_profile_private,
                "is_history_private": user.history_is_private,
            },
        }

    def _check_password(self, user: User, password: str | None, field: str) -> None:
        if password is None:
            raise ValidationError(f"Missing `{field}` body field")
        if not verify_password(password, user.password_hash):
            raise AuthenticationFailure(PASSWORD_MISMATCH)

    async def username_taken(self, username: str) -> bool:
        """Check whether any user already has this username."""
        result = await self.session.execute(select(exists().where(User.username == username)))
        return bool(result.scalar())

    async def update_profile(self, user: User, changes: ProfileChanges) -> list[str]:
        """Apply profile changes in a single write.

        All checks run before anything is written, and the fetched user is
        not modified while the field set is being built.

        Args:
            user: Authenticated user
            changes: Requested changes

        Returns:
            Names of the updated columns

        Raises:
            ValidationError: Missing confirmation or invalid username
            AuthenticationFailure: Confirmation password does not match
            ConflictError: Username already taken
        """
        if changes.needs_confirmation:
            self._check_password(user, changes.confirm_password, "confirm_password")

        values: dict[str, Any] = {}

        if changes.username is not None:
            if not is_valid_username(changes.username):
                raise ValidationError("Invalid username")
            if await self.username_taken(changes.username):
                raise ConflictError("Username taken")
            values["username"] = changes.username

        if changes.new_password is not None:
            values["password_hash"] = hash_password(changes.new_password)
            values["token"] = generate_token()

        if changes.is_profile_private is not None:
            values["is_profile_private"] = changes.is_profile_private

        if changes.is_history_private is not None:
            values["is_history_private"] = changes.is_history_private

        if not values:
            return []

        await self.session.execute(update(User).where(User.id == user.id).values(**values))
        await self.session.commit()

        # Never log the values themselves; they include the token and hash
        self.logger.info("Profile updated", user_id=user.id, fields=sorted(values))
        return sorted(values)

    async def clear_history(self, user: User, password: str | None) -> int:
        """Delete every sample of the user after confirming the password.

        The lifetime counter is kept.

        Returns:
            Number of samples deleted
        """
        self._check_password(user, password, "password")

        result = await self.session.execute(delete(MoodSample).where(MoodSample.user_id == user.id))
        await self.session.commit()

        self.logger.info("History cleared", user_id=user.id, deleted=result.rowcount)
        return result.rowcount

    async def delete_account(self, user: User, password: str | None) -> None:
        """Delete the user and all of their samples after confirming the password.

        Samples are deleted before the user row.
        """
        self._check_password(user, password, "password")

        await self.session.execute(delete(MoodSample).where(MoodSample.user_id == user.id))
        await self.session.execute(delete(User).where(User.id == user.id))
        await self.session.commit()

        self.logger.info("Account deleted", user_id=user.id)
