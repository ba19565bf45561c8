"""Pydantic schemas for request bodies.

Types are strict: ``"0.5"`` is not a number and ``1`` is not a boolean.
Mood value ranges are checked in the services.
"""

from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from moodmeter_server.core.exceptions import ValidationError
from moodmeter_server.services.account import ProfileChanges
from moodmeter_server.services.mood import INT64_MAX, INT64_MIN

ModelT = TypeVar("ModelT", bound=BaseModel)


class MoodUpdateRequest(BaseModel):
    """Request body for PUT /mood."""

    pleasantness: StrictFloat | StrictInt = Field(description="Pleasantness from -1 to 1")
    energy: StrictFloat | StrictInt = Field(description="Energy from -1 to 1")


class MoodDeleteRequest(BaseModel):
    """Request body for DELETE /mood."""

    timestamps: list[Annotated[StrictInt, Field(ge=INT64_MIN, le=INT64_MAX)]] = Field(
        description="Timestamps of the samples to delete"
    )


class PasswordConfirmRequest(BaseModel):
    """Request body for destructive account operations."""

    password: StrictStr = Field(description="Current account password")


class ProfileUpdateRequest(BaseModel):
    """Request body for PATCH /me. Omitted fields are left unchanged."""

    model_config = ConfigDict(extra="ignore")

    username: StrictStr | None = Field(default=None, description="New username")
    new_password: StrictStr | None = Field(default=None, description="New password")
    confirm_password: StrictStr | None = Field(
        default=None, description="Current password, required to change username or password"
    )
    is_profile_private: StrictBool | None = Field(default=None, description="Hide profile")
    is_history_private: StrictBool | None = Field(default=None, description="Hide history")

    def to_changes(self) -> ProfileChanges:
        """Convert to the service-level update intent."""
        return ProfileChanges(
            username=self.username,
            new_password=self.new_password,
            confirm_password=self.confirm_password,
            is_profile_private=self.is_profile_private,
            is_history_private=self.is_history_private,
        )


def parse_body(model: type[ModelT], data: Any, message: str) -> ModelT:
    """Validate a JSON body against a schema.

    Args:
        model: Schema to validate against
        data: Decoded JSON body
        message: Error message to report on failure

    Returns:
        The validated model

    Raises:
        ValidationError: With ``message`` if validation fails
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError:
        raise ValidationError(message) from None
