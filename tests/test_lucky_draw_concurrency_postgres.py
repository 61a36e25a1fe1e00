"""Concurrent spins against a real PostgreSQL database.

Set ``REWARDS_TEST_POSTGRES_URL`` (``postgresql+asyncpg://...``) to run these; the
database is wiped and recreated from the model metadata.
"""

import asyncio
import os
from collections import Counter
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rewards_api import models  # noqa: F401
from rewards_api.db.base import Base
from rewards_api.models.lucky_draw import LuckyDrawPrize, LuckyDrawRecord
from rewards_api.models.user import User
from rewards_api.services.discount_codes import DiscountCodeService
from rewards_api.services.lucky_draw import ChanceLedger, FixedRandomSource, LuckyDrawService
from rewards_api.services.monthly_cards import MonthlyCardService


POSTGRES_URL = os.getenv("REWARDS_TEST_POSTGRES_URL")

pytestmark = pytest.mark.skipif(not POSTGRES_URL, reason="REWARDS_TEST_POSTGRES_URL not set")


@pytest_asyncio.fixture
async def pg_session_factory():
    engine = create_async_engine(POSTGRES_URL, future=True, pool_size=20)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.mark.asyncio
async def test_parallel_spins_never_oversell_limited_prize(pg_session_factory) -> None:
    stock_limit, contenders = 3, 12

    async with pg_session_factory() as session:
        session.add_all(
            [
                LuckyDrawPrize(name="Membership Monthly Card", value_cents=0, probability_bp=50, stock_limit=stock_limit, stock_remaining=stock_limit),
                LuckyDrawPrize(name="Thank You", value_cents=0, probability_bp=9950, stock_limit=None, stock_remaining=None),
            ]
        )
        users = [User(id=uuid4(), email=f"racer-{index}@example.com") for index in range(contenders)]
        session.add_all(users)
        await session.commit()
        for user in users:
            await ChanceLedger(session).award(user.id, 1)
        await session.commit()

    async def spin(user_id):
        async with pg_session_factory() as session:
            service = LuckyDrawService(
                session,
                discount_codes=DiscountCodeService(session),
                monthly_cards=MonthlyCardService(session),
                rng=FixedRandomSource([0, 0]),
            )
            return (await service.spin(user_id)).prize.name

    results = await asyncio.gather(*(spin(user.id) for user in users))

    assert Counter(results)["Membership Monthly Card"] == stock_limit
    async with pg_session_factory() as session:
        prize = (
            await session.execute(select(LuckyDrawPrize).where(LuckyDrawPrize.name == "Membership Monthly Card"))
        ).scalar_one()
        won = (
            await session.execute(
                select(func.count()).select_from(LuckyDrawRecord).where(LuckyDrawRecord.prize_id == prize.id)
            )
        ).scalar_one()
    assert prize.stock_remaining == 0
    assert won == stock_limit
