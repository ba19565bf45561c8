"""Mood sample write path.

Rapid writes (e.g. a slider being dragged) are coalesced: a write that
lands within the coalescing window of the latest sample overwrites that
sample instead of creating a new one. Only new samples count towards the
user's lifetime ``stats_mood_sets`` counter.

The read-then-write decision is not atomic. Two concurrent writes by the
same user inside the window may both insert, or one may be lost.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.clock import Clock, now_ms
from moodmeter_server.core.config import settings
from moodmeter_server.core.exceptions import ValidationError
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User

logger = structlog.get_logger()

MOOD_VALUES_MESSAGE = "`pleasantness` and `energy` fields need to be a float from -1 to 1"
TIMESTAMPS_MESSAGE = "`timestamps` needs to be an array of integers"

# Range of the BIGINT timestamp column
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class MoodSnapshot:
    """Read-only view of a mood sample.

    ``id`` is None for the default sample of a user without samples.
    """

    timestamp: int
    pleasantness: float
    energy: float
    id: int | None = None

    @classmethod
    def from_sample(cls, sample: MoodSample) -> "MoodSnapshot":
        """Build a snapshot from a database row."""
        return cls(
            timestamp=sample.timestamp,
            pleasantness=sample.pleasantness,
            energy=sample.energy,
            id=sample.id,
        )


# Stand-in for users without samples; timestamp 0 never falls inside the window
DEFAULT_MOOD = MoodSnapshot(timestamp=0, pleasantness=0.0, energy=0.0)


@dataclass(frozen=True)
class MoodWrite:
    """Outcome of a mood write."""

    sample: MoodSnapshot
    coalesced: bool


def _is_mood_value(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return abs(value) <= 1 and math.isfinite(value)


def validate_mood_values(pleasantness: Any, energy: Any) -> tuple[float, float]:
    """Check a candidate mood pair.

    Args:
        pleasantness: Candidate pleasantness
        energy: Candidate energy

    Returns:
        Both values as floats

    Raises:
        ValidationError: Unless both are finite numbers with absolute value <= 1
    """
    if not (_is_mood_value(pleasantness) and _is_mood_value(energy)):
        raise ValidationError(MOOD_VALUES_MESSAGE)
    return float(pleasantness), float(energy)


def validate_timestamps(timestamps: Any) -> list[int]:
    """Check a list of sample timestamps.

    Raises:
        ValidationError: Unless ``timestamps`` is a list of 64-bit integers
    """
    if not isinstance(timestamps, list) or any(
        isinstance(ts, bool) or not isinstance(ts, int) or not INT64_MIN <= ts <= INT64_MAX
        for ts in timestamps
    ):
        raise ValidationError(TIMESTAMPS_MESSAGE)
    return timestamps


class MoodService:
    """Reads and writes a user's mood samples."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = now_ms,
        window_ms: int | None = None,
    ) -> None:
        """Initialize mood service.

        Args:
            session: Database session
            clock: Source of epoch milliseconds
            window_ms: Coalescing window (defaults to ``settings.coalesce_window_ms``)
        """
        self.session = session
        self.clock = clock
        self.window_ms = settings.coalesce_window_ms if window_ms is None else window_ms
        self.logger = logger.bind(service="mood")

    async def latest(self, user_id: int) -> MoodSnapshot:
        """Get the user's most recent sample (highest id), or the default sample."""
        result = await self.session.execute(
            select(MoodSample)
            .where(MoodSample.user_id == user_id)
            .order_by(MoodSample.id.desc())
            .limit(1)
        )
        sample = result.scalar_one_or_none()
        return MoodSnapshot.from_sample(sample) if sample else DEFAULT_MOOD

    async def set_mood(self, user: User, pleasantness: Any, energy: Any) -> MoodWrite:
        """Record a mood for the user, coalescing with a recent sample.

        If the latest sample was written less than the window ago, it is
        overwritten in place and the lifetime counter is untouched.
        Otherwise a new sample is inserted and ``stats_mood_sets`` is
        incremented by one. Both writes are committed together.

        Args:
            user: Subject user
            pleasantness: New pleasantness in [-1, 1]
            energy: New energy in [-1, 1]

        Returns:
            The written sample and whether it was coalesced

        Raises:
            ValidationError: If either value is invalid
        """
        pleasantness, energy = validate_mood_values(pleasantness, energy)

        latest = await self.latest(user.id)
        now = self.clock()

        if latest.id is not None and latest.timestamp + self.window_ms > now:
            await self.session.execute(
                update(MoodSample)
                .where(MoodSample.id == latest.id)
                .values(pleasantness=pleasantness, energy=energy, timestamp=now)
            )
            await self.session.commit()

            self.logger.debug("Coalesced mood sample", user_id=user.id, sample_id=latest.id)
            return MoodWrite(
                sample=MoodSnapshot(now, pleasantness, energy, id=latest.id),
                coalesced=True,
            )

        sample = MoodSample(
            user_id=user.id,
            timestamp=now,
            pleasantness=pleasantness,
            energy=energy,
        )
        self.session.add(sample)
        await self.session.execute(
            update(User)
            .where(User.id == user.id)
            .values(stats_mood_sets=User.stats_mood_sets + 1)
        )
        await self.session.commit()

        self.logger.info("Recorded mood sample", user_id=user.id, sample_id=sample.id)
        return MoodWrite(sample=MoodSnapshot.from_sample(sample), coalesced=False)

    async def delete_samples(self, user_id: int, timestamps: Any) -> int:
        """Delete the user's samples with the given timestamps.

        Args:
            user_id: Owner of the samples
            timestamps: Epoch-millisecond timestamps to delete

        Returns:
            Number of samples deleted

        Raises:
            ValidationError: If ``timestamps`` is not a list of integers
        """
        timestamps = validate_timestamps(timestamps)

        result = await self.session.execute(
            delete(MoodSample).where(
                MoodSample.user_id == user_id,
                MoodSample.timestamp.in_(timestamps),
            )
        )
        await self.session.commit()

        self.logger.info("Deleted mood samples", user_id=user_id, deleted=result.rowcount)
        return result.rowcount
