"""Gamification API endpoints: badge catalogue and level table."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rada.dependencies import get_db
from rada.gamification.badge_service import list_active_badges
from rada.gamification.level_thresholds import LEVEL_THRESHOLDS
from rada.gamification.schemas import AllBadgesResponse, AllLevelsResponse, BadgeResponse, LevelEntry

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges(db: AsyncSession = Depends(get_db)):
    """Get all active badge definitions."""
    badges = await list_active_badges(db)
    return AllBadgesResponse(badges=[BadgeResponse.model_validate(b) for b in badges])


@router.get("/levels", response_model=AllLevelsResponse)
async def list_levels():
    """Get the level threshold table."""
    return AllLevelsResponse(levels=[LevelEntry(**lt) for lt in LEVEL_THRESHOLDS])
