"""Level thresholds and computation.

Levels 1-10 advance every 100 XP, matching the web client's progress bar.
Beyond that the bands widen.
"""

from __future__ import annotations

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Citizen", "xp_required": 0, "cumulative": 0},
    {"level": 2, "title": "Curious Voter", "xp_required": 100, "cumulative": 100},
    {"level": 3, "title": "Informed Voter", "xp_required": 100, "cumulative": 200},
    {"level": 4, "title": "Ward Watcher", "xp_required": 100, "cumulative": 300},
    {"level": 5, "title": "Baraza Regular", "xp_required": 100, "cumulative": 400},
    {"level": 6, "title": "Budget Reader", "xp_required": 100, "cumulative": 500},
    {"level": 7, "title": "Bill Tracker", "xp_required": 100, "cumulative": 600},
    {"level": 8, "title": "County Advocate", "xp_required": 100, "cumulative": 700},
    {"level": 9, "title": "Constitution Student", "xp_required": 100, "cumulative": 800},
    {"level": 10, "title": "Civic Champion", "xp_required": 100, "cumulative": 900},
    {"level": 15, "title": "Public Watchdog", "xp_required": 1100, "cumulative": 2000},
    {"level": 20, "title": "People's Delegate", "xp_required": 3000, "cumulative": 5000},
    {"level": 25, "title": "Mwananchi Mentor", "xp_required": 5000, "cumulative": 10000},
    {"level": 30, "title": "Rada Elder", "xp_required": 15000, "cumulative": 25000},
]


def compute_level(total_xp: int) -> dict:
    """Compute level info from total XP."""
    current = LEVEL_THRESHOLDS[0]
    next_level = LEVEL_THRESHOLDS[1]

    for i in range(len(LEVEL_THRESHOLDS) - 1):
        if total_xp >= LEVEL_THRESHOLDS[i]["cumulative"]:
            current = LEVEL_THRESHOLDS[i]
            next_level = LEVEL_THRESHOLDS[i + 1]

    if total_xp >= LEVEL_THRESHOLDS[-1]["cumulative"]:
        current = LEVEL_THRESHOLDS[-1]
        next_level = LEVEL_THRESHOLDS[-1]

    xp_into_level = total_xp - current["cumulative"]
    xp_for_level = next_level["cumulative"] - current["cumulative"]

    # Max level
    if xp_for_level == 0:
        xp_for_level = 1

    return {
        "level": current["level"],
        "title": current["title"],
        "xp_into_level": xp_into_level,
        "xp_for_level": xp_for_level,
        "next_level": next_level["level"],
        "next_title": next_level["title"],
    }
