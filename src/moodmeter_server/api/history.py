"""Mood history endpoints."""

from typing import Annotated, Any

from litestar import Router, delete, get
from litestar.di import Provide
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from moodmeter_server.core.auth import provide_self_user, provide_subject_user
from moodmeter_server.models.user import User
from moodmeter_server.schemas import PasswordConfirmRequest, parse_body
from moodmeter_server.services.account import AccountService
from moodmeter_server.services.history import HistoryService, parse_sort


@get(
    ["/history/all", "/history/all/{user:str}"],
    status_code=HTTP_200_OK,
    dependencies={"subject": Provide(provide_subject_user)},
)
async def get_full_history(
    subject: User,
    session: AsyncSession,
    sort: Annotated[
        str | None, Parameter(query="sort", description="'newest' (default) or 'oldest'")
    ] = None,
) -> dict[str, Any]:
    """Get every mood sample of the caller, or of a public user by name.

    Values are truncated to two decimals.

    Example:
        GET /history/all/alice?sort=oldest
    """
    entries = await HistoryService(session).full_history(subject.id, parse_sort(sort))
    return {"status": "ok", "entries": entries}


@delete(
    "/history/all",
    status_code=HTTP_200_OK,
    dependencies={"current_user": Provide(provide_self_user)},
)
async def delete_full_history(
    current_user: User,
    session: AsyncSession,
    data: Any = None,
) -> dict[str, str]:
    """Delete all of the caller's mood samples. Requires the password."""
    body = parse_body(PasswordConfirmRequest, data, "Missing `password` body field")
    await AccountService(session).clear_history(current_user, body.password)
    return {"status": "ok"}


@get(
    ["/history", "/history/{user:str}"],
    status_code=HTTP_200_OK,
    dependencies={"subject": Provide(provide_subject_user)},
)
async def get_history_page(
    subject: User,
    session: AsyncSession,
    limit: Annotated[int | None, Parameter(query="limit", description="Page size (1-100)")] = None,
    page: Annotated[int, Parameter(query="page", description="Zero-based page")] = 0,
    before: Annotated[
        int | None, Parameter(query="before", description="Exclusive upper bound (epoch ms)")
    ] = None,
    after: Annotated[
        int | None, Parameter(query="after", description="Exclusive lower bound (epoch ms)")
    ] = None,
    sort: Annotated[
        str | None, Parameter(query="sort", description="'newest' (default) or 'oldest'")
    ] = None,
) -> dict[str, Any]:
    """Get a page of mood history inside a time range.

    ``pages`` is derived from the lifetime sample counter and is only an
    approximation of the pages available for the given range.

    Example:
        GET /history?limit=10&page=1&after=1767225600000
    """
    result = await HistoryService(session).page(
        subject,
        limit=limit,
        page=page,
        before=before,
        after=after,
        sort=sort,
    )
    return {"status": "ok", **result.to_dict()}


history_router = Router(
    path="/",
    route_handlers=[get_full_history, delete_full_history, get_history_page],
    tags=["History"],
)
