"""User account model."""

from typing import Any

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from moodmeter_server.models.base import Base, CreatedAtMixin


class User(Base, CreatedAtMixin):
    """A mood tracking account.

    Attributes:
        id: Auto-incrementing primary key
        username: Unique handle, used for public lookups
        password_hash: Argon2 hash of the account password
        token: Opaque bearer token, reissued on password change
        custom_labels: Client display labels for the mood axes (opaque)
        custom_colors: Client color mapping (opaque)
        is_profile_private: Hide the whole profile from lookups by name
        is_history_private: Hide mood history from lookups by name
        stats_mood_sets: Lifetime count of distinct (non-coalesced) samples
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True)

    custom_labels: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    custom_colors: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    is_profile_private: Mapped[bool] = mapped_column(default=False)
    is_history_private: Mapped[bool] = mapped_column(default=False)

    stats_mood_sets: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, username={self.username})>"

    @property
    def history_is_private(self) -> bool:
        """Effective history privacy: a private profile implies private history."""
        return self.is_profile_private or self.is_history_private
