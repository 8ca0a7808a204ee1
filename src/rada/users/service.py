"""User management business logic."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from rada.db.models import Badge, User, UserBadge, XPTransaction
from rada.gamification.errors import UnknownUser

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def create_user(
    db: AsyncSession,
    nickname: str = "Anonymous",
    emoji: str = "🧑",
    county: str | None = None,
) -> User:
    """Create an anonymous user with a freshly generated uuid."""
    user = User(
        uuid=str(uuid.uuid4()),
        nickname=nickname,
        emoji=emoji,
        county=county,
        xp=0,
        level=1,
        level_title="Citizen",
        streak=0,
        longest_streak=0,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("user_created", user_uuid=user.uuid)
    return user


async def get_user_by_uuid(db: AsyncSession, user_uuid: str) -> User:
    """Resolve a user by uuid.

    Raises:
        UnknownUser: If no such user exists.
    """
    result = await db.execute(select(User).where(User.uuid == user_uuid))
    user = result.scalar_one_or_none()
    if user is None:
        msg = f"User {user_uuid} not found"
        raise UnknownUser(msg)
    return user


async def get_user_badges(db: AsyncSession, user: User) -> list[tuple[Badge, UserBadge]]:
    """Earned badges for ``user``, oldest first."""
    result = await db.execute(
        select(Badge, UserBadge)
        .join(UserBadge, UserBadge.badge_id == Badge.id)
        .where(UserBadge.user_id == user.id)
        .order_by(UserBadge.earned_at.asc(), Badge.sort_order.asc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_xp_history(
    db: AsyncSession,
    user: User,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[XPTransaction], int]:
    """Paginated XP transactions, newest first. Returns (entries, total)."""
    total = (
        await db.execute(
            select(func.count()).select_from(XPTransaction).where(XPTransaction.user_id == user.id)
        )
    ).scalar() or 0

    result = await db.execute(
        select(XPTransaction)
        .where(XPTransaction.user_id == user.id)
        .order_by(XPTransaction.created_at.desc(), XPTransaction.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(result.scalars().all()), total
