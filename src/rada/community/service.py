"""Community actions that earn XP: posts, likes, comments, polls and candles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rada.db.models import Comment, Memory, Poll, PollVote, Post, PostLike, User
from rada.db.upsert import execute_insert_ignore
from rada.gamification.errors import AlreadyAwarded, InvalidAward, UnknownTarget
from rada.gamification.xp_service import AwardResult, award_xp
from rada.users.service import get_user_by_uuid

logger = logging.getLogger(__name__)

POST_TYPES = ("story", "report", "poem", "audio", "image")
MAX_COMMENT_LENGTH = 1000

XP_CREATE_POST = 10
XP_POST_APPROVED = 20
XP_POST_LIKED = 2
XP_COMMENT = 5
XP_VOTE_POLL = 5
XP_LIGHT_CANDLE = 5


@dataclass
class PostResult:
    post: Post
    award: AwardResult


@dataclass
class LikeResult:
    likes: int
    author_award: AwardResult


@dataclass
class CommentResult:
    comment: Comment
    award: AwardResult


@dataclass
class CandleResult:
    candles_lit: int
    award: AwardResult


class CommunityService:
    """Community feed, polls and memory archive actions."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _now(self, now: datetime | None) -> datetime:
        return now or datetime.now(timezone.utc)

    async def _verified_post(self, post_id: int) -> Post:
        post = await self.db.get(Post, post_id)
        if post is None or not post.verified:
            msg = "Post not found or not verified"
            raise UnknownTarget(msg)
        return post

    # --- Posts ---

    async def create_post(
        self,
        user_uuid: str,
        type: str,  # noqa: A002
        title: str,
        content: str | None = None,
        county: str | None = None,
        tags: list[str] | None = None,
        is_anonymous: bool = False,
        now: datetime | None = None,
    ) -> PostResult:
        """Submit a post for review and grant the author XP."""
        if type not in POST_TYPES:
            msg = f"Invalid post type. Must be one of: {', '.join(POST_TYPES)}"
            raise InvalidAward(msg)
        if not title or not title.strip():
            msg = "Title is required"
            raise InvalidAward(msg)

        now = self._now(now)
        user = await get_user_by_uuid(self.db, user_uuid)
        post = Post(
            user_id=user.id,
            type=type,
            title=title.strip(),
            content=content,
            county=county,
            tags=tags,
            is_anonymous=is_anonymous,
            verified=False,
            likes=0,
            comments=0,
            created_at=now,
        )
        self.db.add(post)
        await self.db.flush()

        award = await award_xp(
            self.db, user.uuid, "create_post", XP_CREATE_POST,
            reference=("post", post.id), now=now,
        )
        return PostResult(post=post, award=award)

    async def approve_post(self, post_id: int, now: datetime | None = None) -> PostResult:
        """Mark a post verified and reward its author once."""
        post = await self.db.get(Post, post_id)
        if post is None:
            msg = f"Post {post_id} not found"
            raise UnknownTarget(msg)

        author = await self.db.get(User, post.user_id)
        post.verified = True
        await self.db.flush()

        award = await award_xp(
            self.db, author.uuid, "post_approved", XP_POST_APPROVED,
            reference=("post", post.id), once="source", active=False, now=self._now(now),
        )
        return PostResult(post=post, award=award)

    async def like_post(self, post_id: int, user_uuid: str, now: datetime | None = None) -> LikeResult:
        """Like a verified post. The author, not the liker, earns XP."""
        now = self._now(now)
        liker = await get_user_by_uuid(self.db, user_uuid)
        post = await self._verified_post(post_id)
        if post.user_id == liker.id:
            msg = "Cannot like your own post"
            raise InvalidAward(msg)

        inserted = await execute_insert_ignore(
            self.db, PostLike, {"post_id": post.id, "user_id": liker.id, "created_at": now},
        )
        if not inserted:
            msg = "You have already liked this post"
            raise AlreadyAwarded(msg)

        await self.db.execute(
            update(Post)
            .where(Post.id == post.id)
            .values(likes=Post.likes + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.refresh(post, attribute_names=["likes"])

        author = await self.db.get(User, post.user_id)
        award = await award_xp(
            self.db, author.uuid, "post_liked", XP_POST_LIKED,
            reference=("post", post.id), active=False, now=now,
        )
        return LikeResult(likes=post.likes, author_award=award)

    async def comment_on_post(
        self,
        post_id: int,
        user_uuid: str,
        content: str,
        parent_comment_id: int | None = None,
        now: datetime | None = None,
    ) -> CommentResult:
        """Comment on a verified post, optionally replying to another comment."""
        content = (content or "").strip()
        if not content:
            msg = "Comment content is required"
            raise InvalidAward(msg)
        if len(content) > MAX_COMMENT_LENGTH:
            msg = f"Comment must be at most {MAX_COMMENT_LENGTH} characters"
            raise InvalidAward(msg)

        now = self._now(now)
        user = await get_user_by_uuid(self.db, user_uuid)
        post = await self._verified_post(post_id)

        if parent_comment_id is not None:
            parent = await self.db.get(Comment, parent_comment_id)
            if parent is None or parent.post_id != post.id:
                msg = "Parent comment not found"
                raise UnknownTarget(msg)

        comment = Comment(
            post_id=post.id,
            user_id=user.id,
            parent_comment_id=parent_comment_id,
            content=content,
            created_at=now,
        )
        self.db.add(comment)
        await self.db.execute(
            update(Post)
            .where(Post.id == post.id)
            .values(comments=Post.comments + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.flush()

        award = await award_xp(
            self.db, user.uuid, "comment_post", XP_COMMENT,
            reference=("comment", comment.id), now=now,
        )
        return CommentResult(comment=comment, award=award)

    # --- Polls ---

    async def vote_poll(
        self,
        poll_id: int,
        user_uuid: str,
        option_index: int,
        county: str | None = None,
        now: datetime | None = None,
    ) -> AwardResult:
        """Cast the user's single vote in an active poll."""
        now = self._now(now)
        user = await get_user_by_uuid(self.db, user_uuid)
        poll = await self.db.get(Poll, poll_id)
        if poll is None or not poll.active:
            msg = f"Poll {poll_id} not found"
            raise UnknownTarget(msg)
        if not 0 <= option_index < len(poll.options or []):
            msg = f"Invalid option {option_index} for poll {poll_id}"
            raise InvalidAward(msg)

        inserted = await execute_insert_ignore(
            self.db,
            PollVote,
            {
                "poll_id": poll.id,
                "user_id": user.id,
                "option_index": option_index,
                "county": county,
                "created_at": now,
            },
        )
        if not inserted:
            msg = "Already voted in this poll"
            raise AlreadyAwarded(msg)

        await self.db.execute(
            update(Poll)
            .where(Poll.id == poll.id)
            .values(total_votes=Poll.total_votes + 1)
            .execution_options(synchronize_session=False)
        )
        return await award_xp(
            self.db, user.uuid, "vote_poll", XP_VOTE_POLL,
            reference=("poll", poll.id), once="source", now=now,
        )

    # --- Memory archive ---

    async def light_candle(self, memory_id: int, user_uuid: str, now: datetime | None = None) -> CandleResult:
        """Light a candle for a hero. Limited to once per hero per day."""
        memory = await self.db.get(Memory, memory_id)
        if memory is None:
            msg = f"Memory {memory_id} not found"
            raise UnknownTarget(msg)

        try:
            award = await award_xp(
                self.db, user_uuid, "light_candle", XP_LIGHT_CANDLE,
                reference=("memory", memory.id), once="daily", now=now,
            )
        except AlreadyAwarded as exc:
            raise AlreadyAwarded("You have already lit a candle for this hero today") from exc

        await self.db.execute(
            update(Memory)
            .where(Memory.id == memory.id)
            .values(candles_lit=Memory.candles_lit + 1)
            .execution_options(synchronize_session=False)
        )
        candles_lit = (
            await self.db.execute(select(Memory.candles_lit).where(Memory.id == memory.id))
        ).scalar_one()
        return CandleResult(candles_lit=candles_lit, award=award)
