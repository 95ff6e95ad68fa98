"""
Test infrastructure for the Blog API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres instance is needed.
- StaticPool makes every task share the single in-memory connection (an
  in-memory SQLite database only exists on the connection that made it).
- The app's ``get_db`` dependency is overridden with the test session
  factory.
- Tables are created before and dropped after each test.
- Redis is disabled (``cache._redis = None``); the cache manager treats
  that as a permanent miss, so tests exercise the database path.
- ``make_user`` / ``make_article`` / ... insert rows directly with explicit
  timestamps so cursor ordering is deterministic.
"""
from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.cache import cache
from app.database import Base, get_db
from app.main import app
from app.middleware import install_query_counter
from app.models import Article, ArticleFavorite, Comment, FollowRelation, Tag, User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# All seeded timestamps are offsets from this instant.
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    async def _make(username: str) -> User:
        user = User(username=username, email=f"{username}@example.com", bio=f"{username} bio")
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def make_article(db_session: AsyncSession):
    """Insert an article created ``minutes`` after ``BASE_TIME``."""

    async def _make(author: User, minutes: int, tags: tuple[str, ...] = ()) -> Article:
        created = BASE_TIME + timedelta(minutes=minutes)
        article = Article(
            slug=f"article-{minutes}",
            title=f"Article {minutes}",
            description=f"About {minutes}",
            body=f"Body {minutes}",
            created_at=created,
            updated_at=created,
            user_id=author.id,
        )
        for name in tags:
            existing = await db_session.execute(select(Tag).where(Tag.name == name))
            article.tags.append(existing.scalar_one_or_none() or Tag(name=name))
        db_session.add(article)
        await db_session.commit()
        return article

    return _make


@pytest_asyncio.fixture
async def make_comment(db_session: AsyncSession):
    async def _make(article: Article, author: User, minutes: int) -> Comment:
        created = BASE_TIME + timedelta(minutes=minutes)
        comment = Comment(
            body=f"Comment {minutes}",
            article_id=article.id,
            user_id=author.id,
            created_at=created,
            updated_at=created,
        )
        db_session.add(comment)
        await db_session.commit()
        return comment

    return _make


@pytest_asyncio.fixture
async def follow(db_session: AsyncSession):
    async def _follow(user: User, target: User) -> None:
        db_session.add(FollowRelation(user_id=user.id, follow_id=target.id))
        await db_session.commit()

    return _follow


@pytest_asyncio.fixture
async def favorite(db_session: AsyncSession):
    async def _favorite(user: User, article: Article) -> None:
        db_session.add(ArticleFavorite(article_id=article.id, user_id=user.id))
        await db_session.commit()

    return _favorite


@pytest_asyncio.fixture
async def read_session() -> AsyncSession:
    """A second session, so reads never come from the seeding identity map."""
    async with async_session_test() as session:
        yield session
