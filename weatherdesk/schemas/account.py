"""Schemas for the signed-in user's profile, theme and search history."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, StringConstraints

from weatherdesk.schemas.auth import UserOut

Theme = Literal["system", "light", "dark"]
Language = Literal["en", "ru"]


class MeResponse(BaseModel):
    """Body returned by GET /me."""

    user: UserOut


class ThemeUpdateRequest(BaseModel):
    """Request body for PUT /me/theme."""

    model_config = ConfigDict(extra="forbid")

    theme: Theme


class ThemeResponse(BaseModel):
    """Body returned by PUT /me/theme."""

    success: bool = True
    theme: Theme


class HistoryCreateRequest(BaseModel):
    """Request body for POST /history."""

    model_config = ConfigDict(extra="forbid")

    city: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
    ]
    lang: Language = "en"


class HistoryItem(BaseModel):
    """One entry of GET /history."""

    city: str
    lang: str
    created_at: int


class HistoryResponse(BaseModel):
    """Body returned by GET /history, newest entry first."""

    history: list[HistoryItem]
