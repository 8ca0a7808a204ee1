"""Community action tests: likes, comments, polls and candles."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from rada.community.service import CommunityService
from rada.db.models import Memory, Poll, Post, User, XPTransaction
from rada.gamification.errors import AlreadyAwarded, InvalidAward, UnknownTarget

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


async def _xp(db, user: User) -> int:
    return (await db.execute(select(User.xp).where(User.id == user.id))).scalar_one()


async def _count(db, user: User, action: str) -> int:
    return (
        await db.execute(
            select(func.count())
            .select_from(XPTransaction)
            .where(XPTransaction.user_id == user.id, XPTransaction.action == action)
        )
    ).scalar_one()


class TestPosts:
    """Post creation and moderation."""

    @pytest.mark.asyncio
    async def test_create_post_pending_review(self, db_session, make_user):
        user = await make_user()
        result = await CommunityService(db_session).create_post(user.uuid, "story", "Clean water in Kibera", now=NOW)

        assert result.post.verified is False
        assert result.award.amount == 10
        assert [b.slug for b in result.award.new_badges] == ["first-post"]

    @pytest.mark.asyncio
    async def test_invalid_post_type(self, db_session, make_user):
        user = await make_user()
        with pytest.raises(InvalidAward):
            await CommunityService(db_session).create_post(user.uuid, "video", "Nope")

    @pytest.mark.asyncio
    async def test_approve_rewards_author_once(self, db_session, make_user):
        user = await make_user()
        svc = CommunityService(db_session)
        created = await svc.create_post(user.uuid, "report", "Potholes on Mombasa Road", now=NOW)
        await db_session.commit()

        approved = await svc.approve_post(created.post.id, now=NOW)
        await db_session.commit()
        assert approved.post.verified is True
        assert approved.award.amount == 20

        with pytest.raises(AlreadyAwarded):
            await svc.approve_post(created.post.id, now=NOW)
        assert await _xp(db_session, user) == 30

    @pytest.mark.asyncio
    async def test_approve_unknown_post(self, db_session):
        with pytest.raises(UnknownTarget):
            await CommunityService(db_session).approve_post(12345)


class TestLikes:
    """Post likes reward the author."""

    @pytest.mark.asyncio
    async def test_like_rewards_author(self, db_session, make_user, verified_post):
        liker = await make_user("liker")
        result = await CommunityService(db_session).like_post(verified_post.id, liker.uuid, now=NOW)

        assert result.likes == 1
        author = await db_session.get(User, verified_post.user_id)
        assert result.author_award.user_uuid == author.uuid
        assert await _xp(db_session, author) == 2
        assert await _xp(db_session, liker) == 0

    @pytest.mark.asyncio
    async def test_like_twice_conflicts(self, db_session, make_user, verified_post):
        liker = await make_user("liker")
        svc = CommunityService(db_session)
        await svc.like_post(verified_post.id, liker.uuid, now=NOW)

        with pytest.raises(AlreadyAwarded):
            await svc.like_post(verified_post.id, liker.uuid, now=NOW)
        likes = (await db_session.execute(select(Post.likes).where(Post.id == verified_post.id))).scalar_one()
        assert likes == 1

    @pytest.mark.asyncio
    async def test_likes_received_do_not_build_author_streak(self, db_session, make_user):
        """An idle author liked every day keeps the streak from their own last action."""
        author = await make_user("author")
        svc = CommunityService(db_session)
        created = await svc.create_post(author.uuid, "story", "Ward baraza notes", now=NOW)
        await svc.approve_post(created.post.id, now=NOW + timedelta(days=1))
        await db_session.commit()

        for day in range(2, 8):
            liker = await make_user(f"liker-{day}")
            result = await svc.like_post(created.post.id, liker.uuid, now=NOW + timedelta(days=day))
            await db_session.commit()
            assert result.author_award.streak == 1

        streak, last_active = (
            await db_session.execute(select(User.streak, User.last_active).where(User.id == author.id))
        ).one()
        assert streak == 1
        assert last_active == NOW.date()
        assert await _xp(db_session, author) == 10 + 20 + 6 * 2

    @pytest.mark.asyncio
    async def test_cannot_like_own_post(self, db_session, verified_post):
        author = await db_session.get(User, verified_post.user_id)
        with pytest.raises(InvalidAward):
            await CommunityService(db_session).like_post(verified_post.id, author.uuid)

    @pytest.mark.asyncio
    async def test_unverified_post_not_found(self, db_session, make_user):
        author = await make_user("author")
        liker = await make_user("liker")
        post = Post(user_id=author.id, type="poem", title="Draft")
        db_session.add(post)
        await db_session.commit()

        with pytest.raises(UnknownTarget):
            await CommunityService(db_session).like_post(post.id, liker.uuid)


class TestComments:
    """Comments on verified posts."""

    @pytest.mark.asyncio
    async def test_comment_awards_commenter(self, db_session, make_user, verified_post):
        user = await make_user("commenter")
        result = await CommunityService(db_session).comment_on_post(verified_post.id, user.uuid, "Well said!", now=NOW)

        assert result.comment.content == "Well said!"
        assert result.award.amount == 5
        comments = (await db_session.execute(select(Post.comments).where(Post.id == verified_post.id))).scalar_one()
        assert comments == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "x" * 1001])
    async def test_comment_length_validated(self, db_session, make_user, verified_post, content):
        user = await make_user("commenter")
        with pytest.raises(InvalidAward):
            await CommunityService(db_session).comment_on_post(verified_post.id, user.uuid, content)

    @pytest.mark.asyncio
    async def test_reply_to_unknown_parent(self, db_session, make_user, verified_post):
        user = await make_user("commenter")
        with pytest.raises(UnknownTarget):
            await CommunityService(db_session).comment_on_post(verified_post.id, user.uuid, "Reply", parent_comment_id=77)


class TestPolls:
    """Poll voting."""

    @pytest.mark.asyncio
    async def test_vote_once(self, db_session, make_user, poll):
        user = await make_user()
        svc = CommunityService(db_session)
        result = await svc.vote_poll(poll.id, user.uuid, 0, county="Nairobi", now=NOW)
        assert result.amount == 5

        with pytest.raises(AlreadyAwarded):
            await svc.vote_poll(poll.id, user.uuid, 1, now=NOW)
        total = (await db_session.execute(select(Poll.total_votes).where(Poll.id == poll.id))).scalar_one()
        assert total == 1
        assert await _count(db_session, user, "vote_poll") == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("option", [-1, 3])
    async def test_option_out_of_range(self, db_session, make_user, poll, option):
        user = await make_user()
        with pytest.raises(InvalidAward):
            await CommunityService(db_session).vote_poll(poll.id, user.uuid, option)

    @pytest.mark.asyncio
    async def test_inactive_poll(self, db_session, make_user):
        user = await make_user()
        closed = Poll(title="Closed", options=["a", "b"], active=False)
        db_session.add(closed)
        await db_session.commit()
        with pytest.raises(UnknownTarget):
            await CommunityService(db_session).vote_poll(closed.id, user.uuid, 0)


class TestCandles:
    """Memorial candles: daily-limited per hero."""

    @pytest.mark.asyncio
    async def test_second_candle_same_day_conflicts(self, db_session, make_user, memory):
        user = await make_user()
        svc = CommunityService(db_session)

        first = await svc.light_candle(memory.id, user.uuid, now=NOW)
        assert first.candles_lit == 1
        assert first.award.amount == 5

        with pytest.raises(AlreadyAwarded, match="already lit a candle"):
            await svc.light_candle(memory.id, user.uuid, now=NOW + timedelta(hours=3))

        candles = (await db_session.execute(select(Memory.candles_lit).where(Memory.id == memory.id))).scalar_one()
        assert candles == 1
        assert await _count(db_session, user, "light_candle") == 1

    @pytest.mark.asyncio
    async def test_candle_next_day(self, db_session, make_user, memory):
        user = await make_user()
        svc = CommunityService(db_session)
        await svc.light_candle(memory.id, user.uuid, now=NOW)
        second = await svc.light_candle(memory.id, user.uuid, now=NOW + timedelta(days=1))
        assert second.candles_lit == 2
        assert second.award.streak == 2

    @pytest.mark.asyncio
    async def test_unknown_memory(self, db_session, make_user):
        user = await make_user()
        with pytest.raises(UnknownTarget):
            await CommunityService(db_session).light_candle(999, user.uuid)
