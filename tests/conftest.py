import os
from datetime import datetime, timezone
from uuid import uuid4

os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rewards_api import models  # noqa: F401
from rewards_api.app import create_app
from rewards_api.db.base import Base
from rewards_api.db.session import get_session
from rewards_api.models.lucky_draw import LuckyDrawPrize
from rewards_api.models.user import User
from rewards_api.observability.lucky_draw import get_lucky_draw_store


FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def reset_lucky_draw_store():
    store = get_lucky_draw_store()
    store.reset()
    yield store
    store.reset()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def app_with_db(session_factory):
    app = create_app()

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    try:
        yield app, session_factory
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(session_factory):
    async def _make_user(email: str | None = None) -> User:
        async with session_factory() as session:
            user = User(
                id=uuid4(),
                email=email or f"member-{uuid4().hex[:8]}@example.com",
                display_name="Member",
                created_at=FIXED_NOW,
                updated_at=FIXED_NOW,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def make_prizes(session_factory):
    """Insert prizes given as ``(name, value_cents, weight, stock_limit)`` tuples, in id order."""

    async def _make_prizes(*specs, is_active: bool = True) -> list[LuckyDrawPrize]:
        async with session_factory() as session:
            prizes = [
                LuckyDrawPrize(
                    name=name,
                    value_cents=value_cents,
                    probability_bp=weight,
                    stock_limit=stock_limit,
                    stock_remaining=stock_limit,
                    is_active=is_active,
                    created_at=FIXED_NOW,
                    updated_at=FIXED_NOW,
                )
                for name, value_cents, weight, stock_limit in specs
            ]
            for prize in prizes:
                session.add(prize)
                await session.flush()
            await session.commit()
            return prizes

    return _make_prizes
