"""Learning challenge completion."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rada.db.models import Challenge, UserChallenge
from rada.db.upsert import execute_insert_ignore
from rada.gamification.errors import AlreadyAwarded, UnknownTarget
from rada.gamification.xp_service import AwardResult, award_xp
from rada.users.service import get_user_by_uuid

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE_XP = 100


class ChallengeService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_challenges(self) -> list[Challenge]:
        result = await self.db.execute(
            select(Challenge).where(Challenge.active.is_(True)).order_by(Challenge.id)
        )
        return list(result.scalars().all())

    async def complete(
        self,
        user_uuid: str,
        challenge_id: int,
        evidence: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> AwardResult:
        """Record a challenge completion and grant its XP. A second completion is a conflict."""
        if now is None:
            now = datetime.now(timezone.utc)

        user = await get_user_by_uuid(self.db, user_uuid)
        challenge = await self.db.get(Challenge, challenge_id)
        if challenge is None or not challenge.active:
            msg = f"Challenge {challenge_id} not found"
            raise UnknownTarget(msg)

        inserted = await execute_insert_ignore(
            self.db,
            UserChallenge,
            {"user_id": user.id, "challenge_id": challenge.id, "evidence": evidence, "completed_at": now},
        )
        if not inserted:
            msg = "Challenge already completed"
            raise AlreadyAwarded(msg)

        await self.db.execute(
            update(Challenge)
            .where(Challenge.id == challenge.id)
            .values(completion_count=Challenge.completion_count + 1)
            .execution_options(synchronize_session=False)
        )

        return await award_xp(
            self.db,
            user.uuid,
            "challenge_completed",
            challenge.xp_reward or DEFAULT_CHALLENGE_XP,
            reference=("challenge", challenge.id),
            once="source",
            now=now,
        )
