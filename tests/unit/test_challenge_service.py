"""Challenge completion tests."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from rada.db.models import Challenge, UserChallenge
from rada.gamification.errors import AlreadyAwarded, UnknownTarget
from rada.learning.challenge_service import ChallengeService


class TestCompleteChallenge:
    """Test ChallengeService.complete."""

    @pytest.mark.asyncio
    async def test_completion_awards_xp(self, db_session, make_user):
        user = await make_user()
        challenge = Challenge(title="Attend a county budget hearing", xp_reward=100)
        db_session.add(challenge)
        await db_session.commit()

        result = await ChallengeService(db_session).complete(user.uuid, challenge.id, {"photo": "hearing.jpg"})

        assert result.amount == 100
        assert result.xp_total == 100
        row = (await db_session.execute(select(UserChallenge))).scalar_one()
        assert row.evidence == {"photo": "hearing.jpg"}
        count = (await db_session.execute(select(Challenge.completion_count))).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_second_completion_conflicts(self, db_session, make_user):
        user = await make_user()
        challenge = Challenge(title="Read the Finance Bill")
        db_session.add(challenge)
        await db_session.commit()

        svc = ChallengeService(db_session)
        await svc.complete(user.uuid, challenge.id)
        await db_session.commit()

        with pytest.raises(AlreadyAwarded):
            await svc.complete(user.uuid, challenge.id)

    @pytest.mark.asyncio
    async def test_unknown_challenge(self, db_session, make_user):
        user = await make_user()
        with pytest.raises(UnknownTarget):
            await ChallengeService(db_session).complete(user.uuid, 404)
