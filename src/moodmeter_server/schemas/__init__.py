"""Pydantic schemas for API requests."""

from moodmeter_server.schemas.requests import (
    MoodDeleteRequest,
    MoodUpdateRequest,
    PasswordConfirmRequest,
    ProfileUpdateRequest,
    parse_body,
)

__all__ = [
    "MoodDeleteRequest",
    "MoodUpdateRequest",
    "PasswordConfirmRequest",
    "ProfileUpdateRequest",
    "parse_body",
]
