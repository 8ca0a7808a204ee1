"""Learning API endpoints: quizzes and challenges."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rada.db.models import Quiz
from rada.dependencies import get_db, get_redis_dep
from rada.gamification.schemas import AwardResponse, NewBadge, award_response
from rada.gamification.xp_service import publish_pending_events
from rada.learning.challenge_service import ChallengeService
from rada.learning.quiz_service import QuizService
from rada.learning.schemas import (
    ChallengeCompleteRequest,
    ChallengeListResponse,
    ChallengeSummary,
    QuizDetail,
    QuizListResponse,
    QuizQuestionPublic,
    QuizSubmitRequest,
    QuizSubmitResponse,
    QuizSummary,
)

router = APIRouter(prefix="/api/v1/learning", tags=["Learning"])


def _summary_fields(quiz: Quiz) -> dict:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "difficulty": quiz.difficulty,
        "passing_score": quiz.passing_score,
        "time_limit": quiz.time_limit,
        "xp_reward": quiz.xp_reward,
        "question_count": len(quiz.questions or []),
    }


# ---- Quizzes ----


@router.get("/quizzes", response_model=QuizListResponse)
async def list_quizzes(db: AsyncSession = Depends(get_db)):
    """List active quizzes."""
    quizzes = await QuizService(db).list_quizzes()
    return QuizListResponse(quizzes=[QuizSummary(**_summary_fields(q)) for q in quizzes])


@router.get("/quizzes/{quiz_id}", response_model=QuizDetail)
async def get_quiz(quiz_id: int, db: AsyncSession = Depends(get_db)):
    """Quiz with its questions and options. Answer keys are never sent."""
    quiz = await QuizService(db).get_quiz(quiz_id)
    questions = [
        QuizQuestionPublic(question=q.get("question", ""), options=q.get("options", []))
        for q in quiz.questions or []
    ]
    return QuizDetail(**_summary_fields(quiz), questions=questions)


@router.post("/quizzes/{quiz_id}/submit", response_model=QuizSubmitResponse)
async def submit_quiz(
    quiz_id: int,
    body: QuizSubmitRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Score an attempt. XP is granted only the first time the quiz is passed."""
    result = await QuizService(db).submit_attempt(body.user_uuid, quiz_id, body.answers)
    await db.commit()
    await publish_pending_events(db, redis)
    return QuizSubmitResponse(
        passed=result.passed,
        score=result.score,
        xp_earned=result.xp_earned,
        correct_answers=result.correct_answers,
        total_questions=result.total_questions,
        passing_score=result.passing_score,
        best_score=result.best_score,
        attempts=result.attempts,
        already_completed=result.already_completed,
        xp_total=result.xp_total,
        new_badges=[NewBadge.model_validate(b) for b in result.new_badges],
    )


# ---- Challenges ----


@router.get("/challenges", response_model=ChallengeListResponse)
async def list_challenges(db: AsyncSession = Depends(get_db)):
    """List active challenges."""
    challenges = await ChallengeService(db).list_challenges()
    return ChallengeListResponse(challenges=[ChallengeSummary.model_validate(c) for c in challenges])


@router.post("/challenges/{challenge_id}/complete", response_model=AwardResponse)
async def complete_challenge(
    challenge_id: int,
    body: ChallengeCompleteRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Complete a challenge once and receive its XP."""
    result = await ChallengeService(db).complete(body.user_uuid, challenge_id, body.evidence)
    await db.commit()
    await publish_pending_events(db, redis)
    return award_response(result)
