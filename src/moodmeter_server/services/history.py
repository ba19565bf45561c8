"""Mood history queries.

Two read modes:
- Full history: every sample of a user.
- Paged history: a page of samples inside a strict ``after < timestamp < before``
  range.

The page count is derived from the lifetime ``stats_mood_sets`` counter, not
from the rows matching the current filter. It is an approximation: deleted
samples and time filters make it diverge from the real number of pages.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.clock import Clock, now_ms
from moodmeter_server.core.config import settings
from moodmeter_server.core.exceptions import ValidationError
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User
from moodmeter_server.services.mood import MoodSnapshot

logger = structlog.get_logger()

# Largest integer exactly representable as a double (JavaScript's safe range)
MAX_SAFE_INTEGER = 2**53 - 1


class SortOrder(str, Enum):
    """History ordering by sample id."""

    NEWEST = "newest"
    OLDEST = "oldest"


def parse_sort(value: str | None, default: SortOrder = SortOrder.NEWEST) -> SortOrder:
    """Parse a ``sort`` query value.

    Raises:
        ValidationError: If a value is given but is not ``newest`` or ``oldest``
    """
    if value is None:
        return default
    try:
        return SortOrder(value)
    except ValueError:
        raise ValidationError("`sort` must be one of ('newest', 'oldest')") from None


def truncate(value: float) -> float:
    """Truncate to two decimals towards negative infinity.

    Note this is a floor, not a round: 0.567 -> 0.56 and -0.001 -> -0.01.
    """
    return math.floor(value * 100) / 100


def format_entry(sample: MoodSample | MoodSnapshot) -> dict[str, Any]:
    """Format a sample for API responses."""
    return {
        "timestamp": sample.timestamp,
        "pleasantness": truncate(sample.pleasantness),
        "energy": truncate(sample.energy),
    }


def _is_safe_integer(value: int) -> bool:
    return -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER


@dataclass
class HistoryPage:
    """One page of history plus the approximate paging totals."""

    total: int
    pages: int
    entries: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the API response."""
        return {"entries": self.entries, "total": self.total, "pages": self.pages}


class HistoryService:
    """Reads a user's mood history."""

    def __init__(self, session: AsyncSession, clock: Clock = now_ms) -> None:
        """Initialize history service.

        Args:
            session: Database session
            clock: Source of epoch milliseconds (default for ``before``)
        """
        self.session = session
        self.clock = clock
        self.logger = logger.bind(service="history")

    def _order(self, sort: SortOrder) -> Any:
        return MoodSample.id.desc() if sort is SortOrder.NEWEST else MoodSample.id.asc()

    async def full_history(
        self, user_id: int, sort: SortOrder = SortOrder.NEWEST
    ) -> list[dict[str, Any]]:
        """Get every sample of a user.

        Args:
            user_id: Subject user
            sort: Ordering by sample id

        Returns:
            Formatted entries
        """
        result = await self.session.execute(
            select(MoodSample).where(MoodSample.user_id == user_id).order_by(self._order(sort))
        )
        return [format_entry(sample) for sample in result.scalars().all()]

    async def page(
        self,
        user: User,
        limit: int | None = None,
        page: int = 0,
        before: int | None = None,
        after: int | None = None,
        sort: str | None = None,
    ) -> HistoryPage:
        """Get one page of a user's history inside a time range.

        Args:
            user: Subject user
            limit: Page size, 1..max (defaults to ``settings.history_default_limit``)
            page: Zero-based page index
            before: Exclusive upper timestamp bound (default: now)
            after: Exclusive lower timestamp bound (default: 0)
            sort: ``newest`` (default) or ``oldest``

        Returns:
            The page, with ``total`` and approximate ``pages``

        Raises:
            ValidationError: On an out-of-range limit, unknown sort or invalid range
        """
        if limit is None:
            limit = settings.history_default_limit
        if not 1 <= limit <= settings.history_max_limit:
            raise ValidationError(f"`limit` must be in range 1..{settings.history_max_limit}")

        order = parse_sort(sort)

        if after is None:
            after = 0
        if before is None:
            before = self.clock()
        if (
            not _is_safe_integer(before)
            or not _is_safe_integer(after)
            or after < 0
            or after >= before
        ):
            raise ValidationError("Invalid time range")

        total = user.stats_mood_sets
        pages = total // limit

        if page < 0 or (page and page >= pages):
            return HistoryPage(total=total, pages=pages)

        result = await self.session.execute(
            select(MoodSample)
            .where(
                MoodSample.user_id == user.id,
                MoodSample.timestamp > after,
                MoodSample.timestamp < before,
            )
            .order_by(self._order(order))
            .limit(limit)
            .offset(page * limit)
        )
        entries = [format_entry(sample) for sample in result.scalars().all()]

        self.logger.debug("History page", user_id=user.id, page=page, returned=len(entries))
        return HistoryPage(total=total, pages=pages, entries=entries)
