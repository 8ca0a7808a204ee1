"""User router: all /api/v1/users/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rada.db.models import Badge
from rada.dependencies import get_db
from rada.gamification.schemas import (
    EarnedBadgeResponse,
    UserBadgesResponse,
    XPHistoryEntry,
    XPHistoryResponse,
)
from rada.users.schemas import UserCreateRequest, UserResponse
from rada.users.service import create_user, get_user_badges, get_user_by_uuid, get_xp_history

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=201)
async def create_user_endpoint(
    body: UserCreateRequest | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Create an anonymous user. The returned uuid identifies them from now on."""
    body = body or UserCreateRequest()
    user = await create_user(db, nickname=body.nickname, emoji=body.emoji, county=body.county)
    await db.commit()
    return UserResponse.model_validate(user)


@router.get("/{user_uuid}", response_model=UserResponse)
async def get_user(user_uuid: str, db: AsyncSession = Depends(get_db)):
    """Public profile with XP, level and streak."""
    user = await get_user_by_uuid(db, user_uuid)
    return UserResponse.model_validate(user)


@router.get("/{user_uuid}/xp/history", response_model=XPHistoryResponse)
async def xp_history(
    user_uuid: str,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Paginated XP transaction history, newest first."""
    user = await get_user_by_uuid(db, user_uuid)
    entries, total = await get_xp_history(db, user, page=page, per_page=per_page)
    return XPHistoryResponse(
        entries=[XPHistoryEntry.model_validate(e) for e in entries],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{user_uuid}/badges", response_model=UserBadgesResponse)
async def user_badges(user_uuid: str, db: AsyncSession = Depends(get_db)):
    """Badges the user has earned."""
    user = await get_user_by_uuid(db, user_uuid)
    rows = await get_user_badges(db, user)
    total_available = (
        await db.execute(select(func.count()).select_from(Badge).where(Badge.is_active.is_(True)))
    ).scalar() or 0

    earned = [
        EarnedBadgeResponse(
            slug=badge.slug,
            name=badge.name,
            icon=badge.icon,
            rarity=badge.rarity,
            earned_at=ub.earned_at,
        )
        for badge, ub in rows
    ]
    return UserBadgesResponse(earned=earned, total_available=total_available, total_earned=len(earned))
