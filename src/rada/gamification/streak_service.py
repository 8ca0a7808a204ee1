"""Daily activity streaks."""

from __future__ import annotations

from datetime import date, timedelta

from rada.db.models import User


def next_streak(last_active: date | None, current: int, today: date) -> int:
    """Streak length after activity on ``today``.

    Same day keeps the streak, the day after extends it, any gap restarts at 1.
    """
    if last_active == today and current > 0:
        return current
    if last_active == today - timedelta(days=1):
        return current + 1
    return 1


def touch_streak(user: User, today: date) -> bool:
    """Record activity for ``today`` on ``user``. Returns True if the streak changed."""
    new_streak = next_streak(user.last_active, user.streak, today)
    changed = new_streak != user.streak
    user.streak = new_streak
    user.longest_streak = max(user.longest_streak, new_streak)
    user.last_active = today
    return changed
