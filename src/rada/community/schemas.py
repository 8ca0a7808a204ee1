"""Request/response schemas for community endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from rada.gamification.schemas import AwardResponse
from rada.schemas import CamelModel


class PostCreateRequest(CamelModel):
    user_uuid: str = Field(min_length=1, max_length=36)
    type: Literal["story", "report", "poem", "audio", "image"]
    title: str = Field(min_length=1, max_length=200)
    content: str | None = None
    county: str | None = Field(default=None, max_length=50)
    tags: list[str] | None = None
    is_anonymous: bool = False


class PostResponse(CamelModel):
    id: int
    type: str
    title: str
    content: str | None = None
    county: str | None = None
    verified: bool
    likes: int
    comments: int
    created_at: datetime | None = None


class PostCreateResponse(CamelModel):
    message: str = "Post submitted for review"
    post: PostResponse
    reward: AwardResponse


class UserActionRequest(CamelModel):
    """Body for actions that only need to know who is acting."""

    user_uuid: str = Field(min_length=1, max_length=36)


class LikeResponse(CamelModel):
    success: bool = True
    likes: int


class CommentCreateRequest(CamelModel):
    user_uuid: str = Field(min_length=1, max_length=36)
    content: str
    parent_comment_id: int | None = None


class CommentResponse(CamelModel):
    id: int
    post_id: int
    parent_comment_id: int | None = None
    content: str
    created_at: datetime | None = None


class CommentCreateResponse(CamelModel):
    comment: CommentResponse
    reward: AwardResponse


class PollVoteRequest(CamelModel):
    user_uuid: str = Field(min_length=1, max_length=36)
    option_index: int
    county: str | None = Field(default=None, max_length=50)


class CandleResponse(AwardResponse):
    candles_lit: int
