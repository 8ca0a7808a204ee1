"""Community API endpoints: posts, likes, comments, polls and memorial candles."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rada.community.schemas import (
    CandleResponse,
    CommentCreateRequest,
    CommentCreateResponse,
    CommentResponse,
    LikeResponse,
    PollVoteRequest,
    PostCreateRequest,
    PostCreateResponse,
    PostResponse,
    UserActionRequest,
)
from rada.community.service import CommunityService
from rada.dependencies import get_db, get_redis_dep
from rada.gamification.schemas import AwardResponse, award_response
from rada.gamification.xp_service import publish_pending_events

router = APIRouter(prefix="/api/v1", tags=["Community"])


@router.post("/posts", response_model=PostCreateResponse, status_code=201)
async def create_post(
    body: PostCreateRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Submit a post for moderation."""
    result = await CommunityService(db).create_post(
        body.user_uuid,
        body.type,
        body.title,
        content=body.content,
        county=body.county,
        tags=body.tags,
        is_anonymous=body.is_anonymous,
    )
    await db.commit()
    await publish_pending_events(db, redis)
    return PostCreateResponse(post=PostResponse.model_validate(result.post), reward=award_response(result.award))


@router.post("/posts/{post_id}/like", response_model=LikeResponse)
async def like_post(
    post_id: int,
    body: UserActionRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Like a post. One like per user; the author earns the XP."""
    result = await CommunityService(db).like_post(post_id, body.user_uuid)
    await db.commit()
    await publish_pending_events(db, redis)
    return LikeResponse(likes=result.likes)


@router.post("/posts/{post_id}/comments", response_model=CommentCreateResponse, status_code=201)
async def comment_on_post(
    post_id: int,
    body: CommentCreateRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Comment on a verified post."""
    result = await CommunityService(db).comment_on_post(
        post_id, body.user_uuid, body.content, parent_comment_id=body.parent_comment_id
    )
    await db.commit()
    await publish_pending_events(db, redis)
    return CommentCreateResponse(
        comment=CommentResponse.model_validate(result.comment),
        reward=award_response(result.award),
    )


@router.post("/polls/{poll_id}/vote", response_model=AwardResponse)
async def vote_poll(
    poll_id: int,
    body: PollVoteRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Vote once in a poll."""
    result = await CommunityService(db).vote_poll(
        poll_id, body.user_uuid, body.option_index, county=body.county
    )
    await db.commit()
    await publish_pending_events(db, redis)
    return award_response(result)


@router.post("/memories/{memory_id}/candle", response_model=CandleResponse)
async def light_candle(
    memory_id: int,
    body: UserActionRequest,
    db: AsyncSession = Depends(get_db),
    redis: object | None = Depends(get_redis_dep),
):
    """Light a memorial candle. Once per hero per day."""
    result = await CommunityService(db).light_candle(memory_id, body.user_uuid)
    await db.commit()
    await publish_pending_events(db, redis)
    return CandleResponse(**award_response(result.award).model_dump(), candles_lit=result.candles_lit)
