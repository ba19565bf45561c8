"""Database models."""

from moodmeter_server.models.base import Base
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User

__all__ = [
    "Base",
    "MoodSample",
    "User",
]
