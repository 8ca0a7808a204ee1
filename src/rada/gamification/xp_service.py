"""XP award service: ledger row, balance, streak, level and badges as one unit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Literal

from sqlalchemy import event, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from rada.db.models import Badge, User, XPTransaction
from rada.db.upsert import execute_insert_ignore
from rada.gamification.badge_service import evaluate_badges
from rada.gamification.errors import AlreadyAwarded, InvalidAward
from rada.gamification.level_thresholds import compute_level
from rada.gamification.streak_service import touch_streak
from rada.redis_client import publish_event
from rada.users.service import get_user_by_uuid

logger = logging.getLogger(__name__)

Once = Literal["source", "daily"]

PENDING_EVENTS_KEY = "rada_reward_events"


@dataclass
class AwardResult:
    """What a successful award changed, for rendering a notification."""

    user_uuid: str
    action: str
    amount: int
    xp_total: int
    level: int
    level_title: str
    level_up: bool
    streak: int
    new_badges: list[Badge] = field(default_factory=list)


def dedupe_key(
    action: str,
    user_id: int,
    reference: tuple[str, object] | None,
    once: Once | None,
    today: date,
) -> str | None:
    """Unique key guarding one-per-source and one-per-day actions, or None if unguarded."""
    if once is None:
        return None
    if reference is None:
        msg = "A guarded award needs a source reference"
        raise InvalidAward(msg)
    ref_type, ref_id = reference
    key = f"{action}:{user_id}:{ref_type}:{ref_id}"
    if once == "daily":
        key = f"{key}:{today.isoformat()}"
    return key




async def award_xp(
    db: AsyncSession,
    user_uuid: str,
    action: str,
    amount: int,
    reference: tuple[str, object] | None = None,
    once: Once | None = None,
    active: bool = True,
    now: datetime | None = None,
) -> AwardResult:
    """Grant ``amount`` XP to a user for ``action``.

    Within the caller's transaction:
    1. Insert the xp_transactions row (skipped on a dedupe_key conflict)
    2. Increment users.xp with a single UPDATE
    3. Advance the daily streak, only when the user acted (``active``)
    4. Recompute level
    5. Evaluate badge unlocks
    6. Stage reward events on the session

    XP earned passively, such as likes received on a post, passes
    ``active=False`` and leaves the streak and ``last_active`` alone.

    The caller commits, then calls ``publish_pending_events``. Raises
    InvalidAward, UnknownUser or AlreadyAwarded; on AlreadyAwarded nothing
    has been written.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        msg = f"XP amount must be a positive integer, got {amount!r}"
        raise InvalidAward(msg)
    if not action or not action.strip():
        msg = "Action kind is required"
        raise InvalidAward(msg)
    if once not in (None, "source", "daily"):
        msg = f"Unknown duplicate guard {once!r}"
        raise InvalidAward(msg)

    now = utc_now(now)
    today = now.date()

    user = await get_user_by_uuid(db, user_uuid)
    key = dedupe_key(action, user.id, reference, once, today)

    ref_type, ref_id = reference if reference is not None else (None, None)
    inserted = await execute_insert_ignore(
        db,
        XPTransaction,
        {
            "user_id": user.id,
            "action": action,
            "amount": amount,
            "reference_id": None if ref_id is None else str(ref_id),
            "reference_type": ref_type,
            "dedupe_key": key,
            "created_at": now,
        },
    )
    if not inserted:
        logger.info("Duplicate %s award for user %s (%s)", action, user_uuid, key)
        msg = "Already performed today" if once == "daily" else "Already performed"
        raise AlreadyAwarded(msg)

    await db.execute(
        update(User)
        .where(User.id == user.id)
        .values(xp=User.xp + amount, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.refresh(user, attribute_names=["xp", "updated_at"])

    if active:
        touch_streak(user, today)

    old_level = user.level
    level_info = compute_level(user.xp)
    user.level = level_info["level"]
    user.level_title = level_info["title"]
    await db.flush()

    new_badges = await evaluate_badges(db, user, now)

    result = AwardResult(
        user_uuid=user.uuid,
        action=action,
        amount=amount,
        xp_total=user.xp,
        level=user.level,
        level_title=user.level_title,
        level_up=user.level > old_level,
        streak=user.streak,
        new_badges=new_badges,
    )
    logger.info("Awarded %d XP to %s for %s (total %d)", amount, user.uuid, action, user.xp)

    _stage_events(db, result, old_level)
    return result


def utc_now(now: datetime | None = None) -> datetime:
    """``now`` as an aware UTC datetime. Naive values are taken to be UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _stage_events(db: AsyncSession, result: AwardResult, old_level: int) -> None:
    """Queue award, badge and level-up events until the transaction commits."""
    events: list[tuple[str, dict]] = db.info.setdefault(PENDING_EVENTS_KEY, [])
    events.append(
        (
            "pubsub:xp_awarded",
            {
                "user_uuid": result.user_uuid,
                "action": result.action,
                "amount": result.amount,
                "xp_total": result.xp_total,
            },
        )
    )
    for badge in result.new_badges:
        events.append(
            (
                "pubsub:badge_earned",
                {
                    "user_uuid": result.user_uuid,
                    "badge_slug": badge.slug,
                    "badge_name": badge.name,
                    "rarity": badge.rarity,
                },
            )
        )
    if result.level_up:
        events.append(
            (
                "pubsub:level_up",
                {
                    "user_uuid": result.user_uuid,
                    "old_level": old_level,
                    "new_level": result.level,
                    "title": result.level_title,
                },
            )
        )


async def publish_pending_events(db: AsyncSession, redis: object | None) -> int:
    """Broadcast the reward events of the committed transaction. Returns the count sent."""
    events: list[tuple[str, dict]] = db.info.pop(PENDING_EVENTS_KEY, [])
    sent = 0
    for channel, payload in events:
        if await publish_event(redis, channel, payload):
            sent += 1
    return sent


@event.listens_for(Session, "after_rollback")
def _discard_pending_events(session: Session) -> None:
    """Drop events staged by a rolled-back transaction."""
    session.info.pop(PENDING_EVENTS_KEY, None)
