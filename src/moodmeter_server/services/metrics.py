"""Text exposition of current moods for public users."""

from collections.abc import Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.config import settings
from moodmeter_server.core.exceptions import ValidationError
from moodmeter_server.models.mood import MoodSample
from moodmeter_server.models.user import User
from moodmeter_server.services.mood import DEFAULT_MOOD, MoodSnapshot

logger = structlog.get_logger()


def parse_usernames(raw: str | None, max_users: int | None = None) -> list[str]:
    """Split the comma-separated ``users`` query value.

    Args:
        raw: Raw query value
        max_users: Maximum accepted names (defaults to ``settings.metrics_max_users``)

    Returns:
        Requested usernames, unvalidated

    Raises:
        ValidationError: If the value is missing or names too many users
    """
    if not raw:
        raise ValidationError("Missing query param `users`")

    limit = settings.metrics_max_users if max_users is None else max_users
    usernames = raw.split(",")
    if len(usernames) > limit:
        raise ValidationError("Too many users")

    return usernames


def render_metrics(users: Sequence[User], moods: dict[int, MoodSnapshot]) -> str:
    """Render the exposition text.

    Three metric blocks in fixed order, each with help and type lines,
    separated by blank lines. Users appear in the given order.
    """
    lines = [
        "# HELP user_energy Current energy of the user.",
        "# TYPE user_energy gauge",
        *(f'user_energy{{user="{u.username}"}} {moods[u.id].energy:.2f}' for u in users),
        "",
        "# HELP user_pleasantness How pleasant the user is feeling.",
        "# TYPE user_pleasantness gauge",
        *(
            f'user_pleasantness{{user="{u.username}"}} {moods[u.id].pleasantness:.2f}'
            for u in users
        ),
        "",
        "# HELP user_mood_sets How often a user has changed their mood.",
        "# TYPE user_mood_sets counter",
        *(f'user_mood_sets{{user="{u.username}"}} {u.stats_mood_sets}' for u in users),
    ]
    return "\n".join(lines) + "\n"


class MetricsService:
    """Builds the metrics snapshot. Read only."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize metrics service.

        Args:
            session: Database session
        """
        self.session = session
        self.logger = logger.bind(service="metrics")

    async def public_users(self, usernames: Sequence[str]) -> list[User]:
        """Get the fully public users among the names, username descending."""
        result = await self.session.execute(
            select(User)
            .where(
                User.username.in_(usernames),
                User.is_profile_private == False,  # noqa: E712
                User.is_history_private == False,  # noqa: E712
            )
            .order_by(User.username.desc())
        )
        return list(result.scalars().all())

    async def latest_moods(self, user_ids: Sequence[int]) -> dict[int, MoodSnapshot]:
        """Get the latest sample of each user in one query.

        Users without samples map to the default sample.
        """
        moods = {user_id: DEFAULT_MOOD for user_id in user_ids}
        if not user_ids:
            return moods

        latest_ids = (
            select(func.max(MoodSample.id))
            .where(MoodSample.user_id.in_(user_ids))
            .group_by(MoodSample.user_id)
        )
        result = await self.session.execute(
            select(MoodSample).where(MoodSample.id.in_(latest_ids))
        )
        for sample in result.scalars().all():
            moods[sample.user_id] = MoodSnapshot.from_sample(sample)

        return moods

    async def snapshot(self, raw_usernames: str | None) -> str:
        """Build the exposition for the requested users.

        Unknown and private users are dropped without error.

        Args:
            raw_usernames: Comma-separated usernames

        Returns:
            Exposition text

        Raises:
            ValidationError: If the list is missing or too long
        """
        usernames = parse_usernames(raw_usernames)
        users = await self.public_users(usernames)
        moods = await self.latest_moods([user.id for user in users])

        self.logger.debug("Metrics snapshot", requested=len(usernames), exported=len(users))
        return render_metrics(users, moods)
