"""Request/response schemas for learning endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from rada.gamification.schemas import NewBadge
from rada.schemas import CamelModel


class QuizQuestionPublic(CamelModel):
    """A question as shown to the learner: no answer key."""

    question: str
    options: list[Any] = []


class QuizSummary(CamelModel):
    id: int
    title: str
    description: str | None = None
    category: str | None = None
    difficulty: str
    passing_score: int
    time_limit: int
    xp_reward: int
    question_count: int


class QuizDetail(QuizSummary):
    questions: list[QuizQuestionPublic]


class QuizListResponse(CamelModel):
    quizzes: list[QuizSummary]


class QuizSubmitRequest(CamelModel):
    user_uuid: str = Field(min_length=1, max_length=36)
    answers: list[Any]


class QuizSubmitResponse(CamelModel):
    passed: bool
    score: int
    xp_earned: int
    correct_answers: int
    total_questions: int
    passing_score: int
    best_score: int
    attempts: int
    already_completed: bool
    xp_total: int
    new_badges: list[NewBadge] = []


class ChallengeSummary(CamelModel):
    id: int
    title: str
    description: str | None = None
    category: str | None = None
    xp_reward: int
    completion_count: int


class ChallengeListResponse(CamelModel):
    challenges: list[ChallengeSummary]


class ChallengeCompleteRequest(CamelModel):
    user_uuid: str = Field(min_length=1, max_length=36)
    evidence: dict[str, Any] | None = None
