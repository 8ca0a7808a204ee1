"""Quiz scoring and the per-(user, quiz) attempt state machine.

NotAttempted -> Attempted(failing) -> Passed. Failing again keeps the
attempt in place; passing sets ``completed`` for good. XP is granted only
on the attempt that first passes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rada.config import get_settings
from rada.db.models import Badge, Quiz, QuizAttempt
from rada.db.upsert import execute_insert_ignore
from rada.gamification.errors import AlreadyAwarded, InvalidAward, UnknownTarget
from rada.gamification.xp_service import award_xp
from rada.users.service import get_user_by_uuid

logger = logging.getLogger(__name__)

DEFAULT_QUIZ_XP = 50


def _correct_key(question: dict[str, Any]) -> Any:  # noqa: ANN401
    if "correct" in question:
        return question["correct"]
    return question.get("correct_answer")


def score_answers(questions: Sequence[dict[str, Any]], answers: Sequence[Any]) -> tuple[int, int, int]:
    """Score ``answers`` against ``questions``. Returns (correct, total, score).

    Score is 100 * correct / total rounded half up, in integer arithmetic.
    Answers beyond the question count are ignored; missing ones are wrong.
    """
    total = len(questions)
    if total == 0:
        msg = "Quiz has no questions"
        raise InvalidAward(msg)

    correct = 0
    for question, answer in zip(questions, answers):
        key = _correct_key(question)
        if answer is not None and key is not None and answer == key:
            correct += 1

    score = (200 * correct + total) // (2 * total)
    return correct, total, score


@dataclass
class QuizResult:
    passed: bool
    score: int
    correct_answers: int
    total_questions: int
    passing_score: int
    xp_earned: int
    best_score: int
    attempts: int
    already_completed: bool
    xp_total: int
    new_badges: list[Badge] = field(default_factory=list)


class QuizService:
    """Quiz catalogue and attempt submission."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_quizzes(self) -> list[Quiz]:
        """List active quizzes."""
        result = await self.db.execute(
            select(Quiz).where(Quiz.active.is_(True)).order_by(Quiz.id)
        )
        return list(result.scalars().all())

    async def get_quiz(self, quiz_id: int) -> Quiz:
        """Get an active quiz, or raise UnknownTarget."""
        quiz = await self.db.get(Quiz, quiz_id)
        if quiz is None or not quiz.active:
            msg = f"Quiz {quiz_id} not found"
            raise UnknownTarget(msg)
        return quiz

    async def submit_attempt(
        self,
        user_uuid: str,
        quiz_id: int,
        answers: Sequence[Any],
        now: datetime | None = None,
    ) -> QuizResult:
        """Score an attempt, update the attempt record and grant XP on a first pass."""
        if now is None:
            now = datetime.now(timezone.utc)

        user = await get_user_by_uuid(self.db, user_uuid)
        quiz = await self.get_quiz(quiz_id)

        correct, total, score = score_answers(quiz.questions or [], answers)
        passing_score = quiz.passing_score if quiz.passing_score is not None else get_settings().quiz_default_passing_score
        passed = score >= passing_score

        await execute_insert_ignore(
            self.db,
            QuizAttempt,
            {
                "user_id": user.id,
                "quiz_id": quiz.id,
                "attempts": 0,
                "best_score": 0,
                "last_score": 0,
                "completed": False,
                "updated_at": now,
            },
        )
        # Row lock serializes concurrent submissions on PostgreSQL; a no-op on SQLite.
        attempt = (
            await self.db.execute(
                select(QuizAttempt)
                .where(QuizAttempt.user_id == user.id, QuizAttempt.quiz_id == quiz.id)
                .with_for_update()
            )
        ).scalar_one()

        was_completed = attempt.completed
        attempt.attempts += 1
        attempt.best_score = max(attempt.best_score, score)
        attempt.last_score = score
        attempt.updated_at = now
        if passed and not was_completed:
            attempt.completed = True
            attempt.completed_at = now
        await self.db.flush()

        xp_earned = 0
        xp_total = user.xp
        new_badges: list[Badge] = []
        reward = quiz.xp_reward or DEFAULT_QUIZ_XP
        if passed and not was_completed:
            try:
                award = await award_xp(
                    self.db,
                    user.uuid,
                    "quiz_passed",
                    reward,
                    reference=("quiz", quiz.id),
                    once="source",
                    now=now,
                )
            except AlreadyAwarded:
                logger.info("Quiz %s already rewarded for user %s", quiz.id, user.uuid)
            else:
                xp_earned = award.amount
                xp_total = award.xp_total
                new_badges = award.new_badges

        return QuizResult(
            passed=passed,
            score=score,
            correct_answers=correct,
            total_questions=total,
            passing_score=passing_score,
            xp_earned=xp_earned,
            best_score=attempt.best_score,
            attempts=attempt.attempts,
            already_completed=was_completed,
            xp_total=xp_total,
            new_badges=new_badges,
        )
