"""Test data helpers."""

from __future__ import annotations

from typing import Any


def make_questions(count: int) -> list[dict[str, Any]]:
    """``count`` multiple-choice questions whose correct option is always index 1."""
    return [
        {"question": f"Question {i + 1}?", "options": ["A", "B", "C", "D"], "correct": 1}
        for i in range(count)
    ]


def answers_with(correct: int, total: int) -> list[int]:
    """An answer sheet with exactly ``correct`` right answers out of ``total``."""
    return [1] * correct + [0] * (total - correct)
