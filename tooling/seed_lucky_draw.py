"""Seed the lucky-draw prize catalog and optionally grant chances to a dev member."""

from __future__ import annotations

import argparse
import asyncio
from datetime import datetime, timezone
from typing import TypedDict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rewards_api.core.settings import settings
from rewards_api.models.lucky_draw import LuckyDrawPrize
from rewards_api.models.user import User
from rewards_api.services.lucky_draw import ChanceLedger


class SeedPrize(TypedDict):
    name: str
    value_cents: int
    probability_bp: int
    stock_limit: int | None


PRIZES: list[SeedPrize] = [
    {"name": "Free Topping Coupon", "value_cents": 50, "probability_bp": 4500, "stock_limit": None},
    {"name": "Free Original Ice Cream Coupon", "value_cents": 500, "probability_bp": 800, "stock_limit": None},
    {"name": "Membership Monthly Card", "value_cents": 0, "probability_bp": 50, "stock_limit": 5},
    {"name": "Half Price Ice Cream Coupon", "value_cents": 250, "probability_bp": 1200, "stock_limit": None},
    {"name": "Thank You", "value_cents": 0, "probability_bp": 3450, "stock_limit": None},
]


async def seed_prizes(session: AsyncSession, *, reset_stock: bool = False) -> None:
    now = datetime.now(timezone.utc)
    for prize in PRIZES:
        existing = await session.execute(select(LuckyDrawPrize).where(LuckyDrawPrize.name == prize["name"]))
        record = existing.scalar_one_or_none()

        if record:
            record.value_cents = prize["value_cents"]
            record.probability_bp = prize["probability_bp"]
            record.stock_limit = prize["stock_limit"]
            if reset_stock or record.stock_remaining is None:
                record.stock_remaining = prize["stock_limit"]
            record.is_active = True
            record.updated_at = now
        else:
            session.add(
                LuckyDrawPrize(
                    name=prize["name"],
                    value_cents=prize["value_cents"],
                    probability_bp=prize["probability_bp"],
                    stock_limit=prize["stock_limit"],
                    stock_remaining=prize["stock_limit"],
                    is_active=True,
                    created_at=now,
                    updated_at=now,
                )
            )
    await session.commit()


async def grant_chances(session: AsyncSession, email: str, count: int) -> None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()
    if user is None:
        raise SystemExit(f"No user with email {email}")

    entry = await ChanceLedger(session).award(user.id, count)
    await session.commit()
    print(f"{email} now has {entry.remaining} lucky draw chances")


async def main(args: argparse.Namespace) -> None:
    engine = create_async_engine(settings.database_url, future=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        async with session_factory() as session:
            await seed_prizes(session, reset_stock=args.reset_stock)
            if args.email:
                await grant_chances(session, args.email, args.chances)
        print("Lucky draw catalog ready")
    finally:
        await engine.dispose()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset-stock", action="store_true", help="Refill limited prizes to their stock limit")
    parser.add_argument("--email", help="Member email to grant chances to")
    parser.add_argument("--chances", type=int, default=3, help="Chances to grant with --email")
    return parser.parse_args()


if __name__ == "__main__":
    asyncio.run(main(_parse_args()))
