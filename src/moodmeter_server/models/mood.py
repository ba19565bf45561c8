"""Mood sample model."""

from sqlalchemy import BigInteger, Float
from sqlalchemy.orm import Mapped, mapped_column

from moodmeter_server.models.base import Base, UserOwnedMixin


class MoodSample(Base, UserOwnedMixin):
    """A single two-dimensional mood report.

    The id is insertion ordered and is the canonical chronological order;
    timestamps can be rewritten by coalesced updates.

    Attributes:
        id: Auto-incrementing primary key
        timestamp: Epoch milliseconds of the (last) write
        pleasantness: -1 (unpleasant) .. 1 (pleasant)
        energy: -1 (calm) .. 1 (energetic)
        user_id: Owning user
    """

    __tablename__ = "mood_samples"

    id: Mapped[int] = mapped_column(primary_key=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, index=True)
    pleasantness: Mapped[float] = mapped_column(Float)
    energy: Mapped[float] = mapped_column(Float)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MoodSample(id={self.id}, user_id={self.user_id}, timestamp={self.timestamp}, "
            f"pleasantness={self.pleasantness}, energy={self.energy})>"
        )
