"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from rada.schemas import CamelModel

if TYPE_CHECKING:
    from rada.gamification.xp_service import AwardResult


# --- Badge ---


class BadgeResponse(CamelModel):
    slug: str
    name: str
    description: str
    icon: str | None = None
    category: str
    rarity: str
    trigger_type: str
    trigger_config: dict = {}


class AllBadgesResponse(CamelModel):
    badges: list[BadgeResponse]


class NewBadge(CamelModel):
    slug: str
    name: str
    icon: str | None = None
    rarity: str


class EarnedBadgeResponse(CamelModel):
    slug: str
    name: str
    icon: str | None = None
    rarity: str
    earned_at: datetime


class UserBadgesResponse(CamelModel):
    earned: list[EarnedBadgeResponse]
    total_available: int
    total_earned: int


# --- XP ---


class XPHistoryEntry(CamelModel):
    action: str
    amount: int
    reference_type: str | None = None
    reference_id: str | None = None
    created_at: datetime | None = None


class XPHistoryResponse(CamelModel):
    entries: list[XPHistoryEntry]
    total: int
    page: int
    per_page: int


class AwardResponse(CamelModel):
    """Outcome of any XP-granting action."""

    success: bool = True
    xp_earned: int
    xp_total: int
    level: int
    level_title: str
    level_up: bool = False
    streak: int
    new_badges: list[NewBadge] = []


# --- Levels ---


class LevelEntry(CamelModel):
    level: int
    title: str
    xp_required: int
    cumulative: int


class AllLevelsResponse(CamelModel):
    levels: list[LevelEntry]


def award_response(result: AwardResult) -> AwardResponse:
    """Render an AwardResult for the client."""
    return AwardResponse(
        xp_earned=result.amount,
        xp_total=result.xp_total,
        level=result.level,
        level_title=result.level_title,
        level_up=result.level_up,
        streak=result.streak,
        new_badges=[NewBadge.model_validate(b) for b in result.new_badges],
    )
