"""Tests for account maintenance."""

import pytest
from conftest import TEST_PASSWORD
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.exceptions import (
    AuthenticationFailure,
    ConflictError,
    ValidationError,
)
from moodmeter_server.core.password import verify_password
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User
from moodmeter_server.services.account import AccountService, ProfileChanges


class TestProfile:
    """Tests for AccountService.profile."""

    @pytest.mark.asyncio
    async def test_profile_shape(self, async_session: AsyncSession, test_user):
        """Test the profile snapshot fields."""
        profile = AccountService(async_session).profile(test_user)

        assert profile["username"] == "alice"
        assert profile["total_mood_changes"] == 0
        assert profile["settings"] == {
            "custom_mood_labels": None,
            "custom_colors": None,
            "is_profile_private": False,
            "is_history_private": False,
        }
        assert isinstance(profile["created_at"], str)

    @pytest.mark.asyncio
    async def test_private_profile_implies_private_history(
        self, async_session: AsyncSession, private_user
    ):
        """Test the effective history flag follows the profile flag."""
        profile = AccountService(async_session).profile(private_user)

        assert private_user.is_history_private is False
        assert profile["settings"]["is_history_private"] is True


class TestUpdateProfile:
    """Tests for AccountService.update_profile."""

    @pytest.mark.asyncio
    async def test_privacy_flags_need_no_confirmation(
        self, async_session: AsyncSession, test_user
    ):
        """Test privacy toggles apply without a password."""
        fields = await AccountService(async_session).update_profile(
            test_user, ProfileChanges(is_history_private=True)
        )

        assert fields == ["is_history_private"]
        await async_session.refresh(test_user)
        assert test_user.is_history_private is True

    @pytest.mark.asyncio
    async def test_empty_update_writes_nothing(self, async_session: AsyncSession, test_user):
        """Test no changes means no write."""
        assert await AccountService(async_session).update_profile(test_user, ProfileChanges()) == []

    @pytest.mark.asyncio
    async def test_password_change_rotates_token(self, async_session: AsyncSession, test_user):
        """Test a new password invalidates the old token."""
        old_token = test_user.token

        fields = await AccountService(async_session).update_profile(
            test_user,
            ProfileChanges(new_password="new secret", confirm_password=TEST_PASSWORD),
        )

        assert fields == ["password_hash", "token"]
        await async_session.refresh(test_user)
        assert test_user.token != old_token
        assert verify_password("new secret", test_user.password_hash)
        assert not verify_password(TEST_PASSWORD, test_user.password_hash)

    @pytest.mark.asyncio
    async def test_rename(self, async_session: AsyncSession, test_user):
        """Test a confirmed rename."""
        await AccountService(async_session).update_profile(
            test_user, ProfileChanges(username="alice_2", confirm_password=TEST_PASSWORD)
        )

        await async_session.refresh(test_user)
        assert test_user.username == "alice_2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [ProfileChanges(username="alice_2"), ProfileChanges(new_password="")],
    )
    async def test_missing_confirmation(self, async_session: AsyncSession, test_user, changes):
        """Test renames and password changes require the current password."""
        with pytest.raises(ValidationError) as exc_info:
            await AccountService(async_session).update_profile(test_user, changes)

        assert exc_info.value.detail == "Missing `confirm_password` body field"

    @pytest.mark.asyncio
    async def test_wrong_confirmation(self, async_session: AsyncSession, test_user):
        """Test a wrong current password is rejected before any write."""
        with pytest.raises(AuthenticationFailure) as exc_info:
            await AccountService(async_session).update_profile(
                test_user,
                ProfileChanges(username="alice_2", confirm_password="wrong", is_profile_private=True),
            )

        assert exc_info.value.detail == "Passwords do not match"
        await async_session.refresh(test_user)
        assert test_user.username == "alice"
        assert test_user.is_profile_private is False

    @pytest.mark.asyncio
    async def test_invalid_username(self, async_session: AsyncSession, test_user):
        """Test the new username must match the pattern."""
        with pytest.raises(ValidationError) as exc_info:
            await AccountService(async_session).update_profile(
                test_user, ProfileChanges(username="Al", confirm_password=TEST_PASSWORD)
            )

        assert exc_info.value.detail == "Invalid username"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", ["bob", "alice"])
    async def test_username_taken(self, async_session: AsyncSession, test_user, make_user, username):
        """Test taken names conflict, including the caller's own."""
        await make_user("bob")

        with pytest.raises(ConflictError) as exc_info:
            await AccountService(async_session).update_profile(
                test_user, ProfileChanges(username=username, confirm_password=TEST_PASSWORD)
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Username taken"


class TestDestructiveOperations:
    """Tests for clearing history and deleting accounts."""

    @pytest.mark.asyncio
    async def test_clear_history_keeps_counter(
        self, async_session: AsyncSession, test_user, add_samples
    ):
        """Test clearing history removes samples but keeps the lifetime count."""
        await add_samples(test_user, (1_000, 0.0, 0.0), (2_000, 0.0, 0.0))

        deleted = await AccountService(async_session).clear_history(test_user, TEST_PASSWORD)

        assert deleted == 2
        await async_session.refresh(test_user)
        assert test_user.stats_mood_sets == 2

    @pytest.mark.asyncio
    async def test_clear_history_wrong_password(
        self, async_session: AsyncSession, test_user, add_samples
    ):
        """Test the password is checked before deleting."""
        await add_samples(test_user, (1_000, 0.0, 0.0))

        with pytest.raises(AuthenticationFailure):
            await AccountService(async_session).clear_history(test_user, "wrong")

        result = await async_session.execute(select(func.count()).select_from(MoodSample))
        assert result.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_delete_account(
        self, async_session: AsyncSession, test_user, make_user, add_samples
    ):
        """Test the user and their samples are removed, others untouched."""
        other = await make_user("bob")
        await add_samples(test_user, (1_000, 0.0, 0.0))
        await add_samples(other, (1_000, 0.0, 0.0))

        await AccountService(async_session).delete_account(test_user, TEST_PASSWORD)

        users = await async_session.execute(select(User.username))
        assert users.scalars().all() == ["bob"]
        samples = await async_session.execute(select(MoodSample.user_id))
        assert samples.scalars().all() == [other.id]

    @pytest.mark.asyncio
    async def test_delete_account_missing_password(self, async_session: AsyncSession, test_user):
        """Test a missing password is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            await AccountService(async_session).delete_account(test_user, None)

        assert exc_info.value.detail == "Missing `password` body field"
