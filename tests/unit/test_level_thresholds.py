"""Level threshold unit tests."""

from __future__ import annotations

import pytest

from rada.gamification.level_thresholds import LEVEL_THRESHOLDS, compute_level


class TestComputeLevel:
    """Test compute_level."""

    def test_zero_xp_is_level_one(self):
        info = compute_level(0)
        assert info["level"] == 1
        assert info["title"] == "Citizen"
        assert info["xp_into_level"] == 0
        assert info["xp_for_level"] == 100
        assert info["next_level"] == 2

    @pytest.mark.parametrize(("xp", "level"), [(99, 1), (100, 2), (250, 3), (899, 9), (900, 10), (1999, 10), (2000, 15)])
    def test_boundaries(self, xp, level):
        assert compute_level(xp)["level"] == level

    def test_first_ten_levels_follow_hundreds(self):
        """Levels 1-10 advance every 100 XP."""
        for xp in range(0, 1000, 50):
            assert compute_level(xp)["level"] == xp // 100 + 1

    def test_max_level(self):
        top = LEVEL_THRESHOLDS[-1]
        info = compute_level(top["cumulative"] + 12345)
        assert info["level"] == top["level"]
        assert info["next_level"] == top["level"]
        assert info["xp_for_level"] == 1

    def test_thresholds_are_increasing(self):
        cumulative = [lt["cumulative"] for lt in LEVEL_THRESHOLDS]
        assert cumulative == sorted(cumulative)
        assert len(set(cumulative)) == len(cumulative)
