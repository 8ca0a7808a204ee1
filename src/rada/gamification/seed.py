"""Badge seed data, upserted by slug at startup."""

from __future__ import annotations

import logging

from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from rada.db.models import Badge

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    # Getting started
    {
        "slug": "first-post",
        "name": "First Voice",
        "description": "Share your first story, report or poem with the community",
        "icon": "📝",
        "category": "community",
        "rarity": "common",
        "trigger_type": "action_count",
        "trigger_config": {"action": "create_post", "threshold": 1},
        "sort_order": 1,
    },
    {
        "slug": "first-quiz",
        "name": "Quiz Starter",
        "description": "Pass your first civic education quiz",
        "icon": "🎓",
        "category": "learning",
        "rarity": "common",
        "trigger_type": "action_count",
        "trigger_config": {"action": "quiz_passed", "threshold": 1},
        "sort_order": 2,
    },
    # Streaks
    {
        "slug": "streak-7",
        "name": "Week Warrior",
        "description": "Stay active seven days in a row",
        "icon": "🔥",
        "category": "streak",
        "rarity": "uncommon",
        "trigger_type": "streak",
        "trigger_config": {"threshold": 7},
        "sort_order": 3,
    },
    {
        "slug": "streak-30",
        "name": "Monthly Mwananchi",
        "description": "Stay active thirty days in a row",
        "icon": "📅",
        "category": "streak",
        "rarity": "rare",
        "trigger_type": "streak",
        "trigger_config": {"threshold": 30},
        "sort_order": 4,
    },
    # XP milestones
    {
        "slug": "digital-citizen",
        "name": "Digital Citizen",
        "description": "Earn 300 XP through civic participation",
        "icon": "🏛️",
        "category": "learning",
        "rarity": "common",
        "trigger_type": "xp_total",
        "trigger_config": {"threshold": 300},
        "sort_order": 5,
    },
    {
        "slug": "constitution-scholar",
        "name": "Constitution Scholar",
        "description": "Earn 500 XP and master the basics of the Constitution",
        "icon": "📜",
        "category": "learning",
        "rarity": "uncommon",
        "trigger_type": "xp_total",
        "trigger_config": {"threshold": 500},
        "sort_order": 6,
    },
    {
        "slug": "budget-expert",
        "name": "Budget Expert",
        "description": "Earn 800 XP and understand how public money is spent",
        "icon": "💰",
        "category": "learning",
        "rarity": "rare",
        "trigger_type": "xp_total",
        "trigger_config": {"threshold": 800},
        "sort_order": 7,
    },
    {
        "slug": "xp-1000",
        "name": "Civic Champion",
        "description": "Reach 1,000 XP",
        "icon": "🏆",
        "category": "milestone",
        "rarity": "epic",
        "trigger_type": "xp_total",
        "trigger_config": {"threshold": 1000},
        "sort_order": 8,
    },
    # Participation
    {
        "slug": "civic-voice",
        "name": "Civic Voice",
        "description": "Vote in five community polls",
        "icon": "🗳️",
        "category": "community",
        "rarity": "uncommon",
        "trigger_type": "action_count",
        "trigger_config": {"action": "vote_poll", "threshold": 5},
        "sort_order": 9,
    },
    {
        "slug": "memory-keeper",
        "name": "Memory Keeper",
        "description": "Light ten candles for heroes in the memory archive",
        "icon": "🕯️",
        "category": "community",
        "rarity": "uncommon",
        "trigger_type": "action_count",
        "trigger_config": {"action": "light_candle", "threshold": 10},
        "sort_order": 10,
    },
    {
        "slug": "learning-streak-master",
        "name": "Learning Streak Master",
        "description": "Pass quizzes or complete challenges twenty times",
        "icon": "⚡",
        "category": "learning",
        "rarity": "epic",
        "trigger_type": "action_count",
        "trigger_config": {"actions": ["quiz_passed", "challenge_completed"], "threshold": 20},
        "sort_order": 11,
    },
]

_UPDATE_COLUMNS = ("name", "description", "icon", "category", "rarity", "trigger_type", "trigger_config", "sort_order")


def _upsert_badge(dialect_name: str, badge_data: dict):  # noqa: ANN202
    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql_insert(Badge).values(**badge_data)
        return stmt.on_duplicate_key_update({col: stmt.inserted[col] for col in _UPDATE_COLUMNS})

    insert_fn = pg_insert if dialect_name == "postgresql" else sqlite_insert
    stmt = insert_fn(Badge).values(**badge_data)
    return stmt.on_conflict_do_update(
        index_elements=["slug"],
        set_={col: stmt.excluded[col] for col in _UPDATE_COLUMNS},
    )


async def seed_badges(db: AsyncSession) -> int:
    """Upsert all badge definitions. Returns number of badges seeded."""
    dialect_name = db.get_bind().dialect.name
    seeded = 0
    for badge_data in BADGE_SEED_DATA:
        await db.execute(_upsert_badge(dialect_name, badge_data))
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
