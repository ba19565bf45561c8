"""Mood endpoints."""

from typing import Any

from litestar import Router, delete, get, put
from litestar.di import Provide
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.auth import provide_self_user, provide_subject_user
from moodmeter_server.models.user import User
from moodmeter_server.schemas import MoodDeleteRequest, MoodUpdateRequest, parse_body
from moodmeter_server.services.history import format_entry
from moodmeter_server.services.mood import MOOD_VALUES_MESSAGE, TIMESTAMPS_MESSAGE, MoodService


@get(
    ["/mood", "/mood/{user:str}"],
    status_code=HTTP_200_OK,
    dependencies={"subject": Provide(provide_subject_user)},
)
async def get_mood(subject: User, session: AsyncSession) -> dict[str, Any]:
    """Get the latest mood of the caller, or of a public user by name.

    A user without samples reports a neutral mood at timestamp 0.

    Example:
        GET /mood/alice
    """
    latest = await MoodService(session).latest(subject.id)
    return {"status": "ok", "mood": format_entry(latest)}


@put(
    "/mood",
    status_code=HTTP_200_OK,
    dependencies={"current_user": Provide(provide_self_user)},
)
async def set_mood(
    current_user: User,
    session: AsyncSession,
    data: Any = None,
) -> dict[str, str]:
    """Record the caller's mood.

    Writes within 10 seconds of the previous one update it instead of
    creating a new sample.

    Example:
        PUT /mood {"pleasantness": 0.5, "energy": -0.2}
    """
    body = parse_body(MoodUpdateRequest, data, MOOD_VALUES_MESSAGE)
    await MoodService(session).set_mood(current_user, body.pleasantness, body.energy)
    return {"status": "ok"}


@delete(
    "/mood",
    status_code=HTTP_200_OK,
    dependencies={"current_user": Provide(provide_self_user)},
)
async def delete_moods(
    current_user: User,
    session: AsyncSession,
    data: Any = None,
) -> dict[str, Any]:
    """Delete the caller's samples with the given timestamps.

    Example:
        DELETE /mood {"timestamps": [1767225600000]}
    """
    body = parse_body(MoodDeleteRequest, data, TIMESTAMPS_MESSAGE)
    deleted = await MoodService(session).delete_samples(current_user.id, body.timestamps)
    return {"status": "ok", "deleted": deleted}


mood_router = Router(
    path="/",
    route_handlers=[get_mood, set_mood, delete_moods],
    tags=["Mood"],
)
