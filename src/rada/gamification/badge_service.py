"""Badge evaluation: pull-based unlocks after every XP award."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rada.db.models import Badge, User, UserBadge, XPTransaction
from rada.db.upsert import execute_insert_ignore

logger = logging.getLogger(__name__)


async def get_badge_by_slug(db: AsyncSession, slug: str) -> Badge | None:
    """Fetch a badge definition by slug."""
    result = await db.execute(select(Badge).where(Badge.slug == slug))
    return result.scalar_one_or_none()


async def list_active_badges(db: AsyncSession) -> list[Badge]:
    result = await db.execute(
        select(Badge).where(Badge.is_active.is_(True)).order_by(Badge.sort_order.asc(), Badge.id.asc())
    )
    return list(result.scalars().all())


async def count_actions(db: AsyncSession, user_id: int, action: str) -> int:
    """Number of XP transactions of kind ``action`` recorded for a user."""
    result = await db.execute(
        select(func.count())
        .select_from(XPTransaction)
        .where(XPTransaction.user_id == user_id, XPTransaction.action == action)
    )
    return result.scalar() or 0


async def is_satisfied(db: AsyncSession, user: User, badge: Badge, counts: dict[str, int]) -> bool:
    """Check a badge's trigger against the user's current state.

    ``counts`` caches action tallies across badges in one evaluation.
    """
    config = badge.trigger_config or {}
    threshold = int(config.get("threshold", 0))

    if badge.trigger_type == "xp_total":
        return user.xp >= threshold
    if badge.trigger_type == "streak":
        return user.streak >= threshold
    if badge.trigger_type == "action_count":
        # "actions" sums several kinds; "action" names one.
        actions = config.get("actions") or ([config["action"]] if config.get("action") else [])
        if not actions:
            logger.warning("Badge %s has no action in trigger_config", badge.slug)
            return False
        total = 0
        for action in actions:
            if action not in counts:
                counts[action] = await count_actions(db, user.id, action)
            total += counts[action]
        return total >= threshold

    logger.warning("Unknown trigger type %s for badge %s", badge.trigger_type, badge.slug)
    return False


async def evaluate_badges(db: AsyncSession, user: User, now: datetime) -> list[Badge]:
    """Insert earned-badge facts for every newly satisfied badge.

    Returns only the badges this call inserted. The UNIQUE(user_id, badge_id)
    constraint makes concurrent evaluations award each badge exactly once.
    """
    earned_ids = select(UserBadge.badge_id).where(UserBadge.user_id == user.id)
    result = await db.execute(
        select(Badge)
        .where(Badge.is_active.is_(True), Badge.id.not_in(earned_ids))
        .order_by(Badge.sort_order.asc(), Badge.id.asc())
    )
    candidates = result.scalars().all()

    counts: dict[str, int] = {}
    new_badges: list[Badge] = []
    for badge in candidates:
        if not await is_satisfied(db, user, badge, counts):
            continue
        inserted = await execute_insert_ignore(
            db,
            UserBadge,
            {"user_id": user.id, "badge_id": badge.id, "earned_at": now},
        )
        if inserted:
            logger.info("User %s earned badge %s", user.uuid, badge.slug)
            new_badges.append(badge)
    return new_badges
