"""Metrics exposition endpoint."""

from typing import Annotated

from litestar import MediaType, Response, Router, get
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.services.metrics import MetricsService


@get("/metrics", status_code=HTTP_200_OK)
async def get_metrics(
    session: AsyncSession,
    users: Annotated[
        str | None,
        Parameter(query="users", description="Comma-separated usernames (at most 16)"),
    ] = None,
) -> Response[str]:
    """Export current moods of public users in text exposition format.

    Private and unknown users are skipped.

    Example:
        GET /metrics?users=alice,bob
    """
    body = await MetricsService(session).snapshot(users)
    return Response(content=body, media_type=MediaType.TEXT)


metrics_router = Router(path="/", route_handlers=[get_metrics], tags=["Metrics"])
