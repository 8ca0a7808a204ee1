"""Request/response schemas for user endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from rada.schemas import CamelModel


class UserCreateRequest(CamelModel):
    nickname: str = Field(default="Anonymous", min_length=1, max_length=50)
    emoji: str = Field(default="🧑", min_length=1, max_length=10)
    county: str | None = Field(default=None, max_length=50)


class UserResponse(CamelModel):
    uuid: str
    nickname: str
    emoji: str
    county: str | None = None
    xp: int
    level: int
    level_title: str
    streak: int
    longest_streak: int
    last_active: date | None = None
    created_at: datetime | None = None
