"""Shared test fixtures.

Every test gets its own SQLite database file, built by the schema reconciler
and seeded with badges. Redis is not configured, so rate limiting is skipped
and reward events are not published.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from rada.config import get_settings
from rada.database import close_db, get_engine, get_session, init_db
from rada.db.models import Memory, Poll, Politician, Post, Quiz, User
from rada.db.reconciler import SchemaReconciler
from rada.gamification.seed import seed_badges
from rada.users.service import create_user
from tests.helpers import make_questions

ADMIN_KEY = "test-admin-key"


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a per-test SQLite file with Redis disabled."""
    monkeypatch.setenv("RADA_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'rada.db'}")
    monkeypatch.setenv("RADA_REDIS_URL", "")
    monkeypatch.setenv("RADA_ADMIN_API_KEY", ADMIN_KEY)
    monkeypatch.setenv("RADA_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def engine(test_settings) -> AsyncGenerator[AsyncEngine, None]:
    """Initialized engine with the full schema and seeded badges."""
    await init_db(test_settings.database_url)
    engine = get_engine()
    report = await SchemaReconciler(engine).reconcile()
    assert report.ok, report.failed

    async for session in get_session():
        await seed_badges(session)
        break

    yield engine
    await close_db()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for service calls and assertions."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app over the test database."""
    from rada.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Key": ADMIN_KEY}


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory creating committed users."""

    async def _make(nickname: str = "alice", **kwargs: Any) -> User:
        user = await create_user(db_session, nickname=nickname, **kwargs)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def make_quiz(db_session: AsyncSession) -> Callable[..., Awaitable[Quiz]]:
    """Factory creating committed quizzes."""

    async def _make(
        questions: int = 5,
        passing_score: int = 70,
        xp_reward: int = 50,
        title: str = "Constitution Basics",
        **kwargs: Any,
    ) -> Quiz:
        quiz = Quiz(
            title=title,
            questions=make_questions(questions),
            passing_score=passing_score,
            xp_reward=xp_reward,
            **kwargs,
        )
        db_session.add(quiz)
        await db_session.commit()
        return quiz

    return _make


@pytest_asyncio.fixture
async def verified_post(db_session: AsyncSession, make_user) -> Post:
    """A verified post by 'author'."""
    author = await make_user("author")
    post = Post(user_id=author.id, type="story", title="Our ward meeting", content="...", verified=True)
    db_session.add(post)
    await db_session.commit()
    return post


@pytest_asyncio.fixture
async def poll(db_session: AsyncSession) -> Poll:
    poll = Poll(title="Should county budgets be published monthly?", options=["Yes", "No", "Not sure"])
    db_session.add(poll)
    await db_session.commit()
    return poll


@pytest_asyncio.fixture
async def memory(db_session: AsyncSession) -> Memory:
    memory = Memory(name="Wangari Maathai", achievement="Green Belt Movement", verified=True)
    db_session.add(memory)
    await db_session.commit()
    return memory


@pytest_asyncio.fixture
async def politician(db_session: AsyncSession) -> Politician:
    politician = Politician(name="Hon. Jane Doe", party="Independent", constituency="Westlands", chamber="National Assembly")
    db_session.add(politician)
    await db_session.commit()
    return politician
