"""Signed-in user endpoints: profile, theme preference, search history."""

from fastapi import APIRouter

from weatherdesk.api.deps import AppSettings, CurrentUser, CurrentUserId, DbSession
from weatherdesk.core.errors import UnauthorizedError
from weatherdesk.core.responses import SuccessResponse
from weatherdesk.repositories.search_repository import SearchRepository
from weatherdesk.repositories.user_repository import UserRepository
from weatherdesk.schemas.account import (
    HistoryCreateRequest,
    HistoryItem,
    HistoryResponse,
    MeResponse,
    ThemeResponse,
    ThemeUpdateRequest,
)
from weatherdesk.schemas.auth import UserOut

me_router = APIRouter()
history_router = APIRouter()


@me_router.get("")
async def get_me(user: CurrentUser) -> MeResponse:
    """Return the current user's record."""
    return MeResponse(user=UserOut.model_validate(user.to_public()))


@me_router.put("/theme")
async def update_theme(
    body: ThemeUpdateRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> ThemeResponse:
    """Persist the theme preference and echo it back."""
    user = await UserRepository.update(db, user_id, theme=body.theme)
    if user is None:
        raise UnauthorizedError()
    await db.commit()
    return ThemeResponse(theme=body.theme)


@history_router.get("")
async def list_history(
    user_id: CurrentUserId,
    db: DbSession,
    settings: AppSettings,
) -> HistoryResponse:
    """Return the user's searches, newest first, capped at HISTORY_PAGE_SIZE."""
    searches = await SearchRepository.list_for_user(
        db, user_id, limit=settings.history_page_size
    )
    return HistoryResponse(
        history=[HistoryItem.model_validate(s.to_history_item()) for s in searches]
    )


@history_router.post("")
async def add_history(
    body: HistoryCreateRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> SuccessResponse:
    """Append one search to the user's history."""
    await SearchRepository.create(db, user_id=user_id, city=body.city, lang=body.lang)
    await db.commit()
    return SuccessResponse()
