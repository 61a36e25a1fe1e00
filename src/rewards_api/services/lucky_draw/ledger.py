"""Per-user chance ledger: awarded vs. used counters."""

from __future__ import annotations

from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.core.clock import Clock, utcnow
from rewards_api.models.lucky_draw import LuckyDrawChance

from .errors import InsufficientChancesError, InvalidArgumentError


_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ChanceLedger:
    """Reads and mutates ``lucky_draw_chances`` inside the caller's transaction.

    Counter changes are single UPDATE statements so concurrent writers never
    lose increments; rows are re-read afterwards to return authoritative state.
    """

    def __init__(self, db_session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self._db = db_session
        self._clock = clock

    async def get(self, user_id: UUID) -> LuckyDrawChance | None:
        stmt = (
            select(LuckyDrawChance)
            .where(LuckyDrawChance.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def ensure(self, user_id: UUID) -> LuckyDrawChance:
        """Return the user's entry, creating a zeroed one on first access."""

        entry = await self.get(user_id)
        if entry is not None:
            return entry

        await self._insert_if_missing(user_id)
        entry = await self.get(user_id)
        if entry is None:  # pragma: no cover - insert-or-fetch always yields a row
            raise RuntimeError(f"Chance ledger entry missing for user {user_id}")
        return entry

    async def award(self, user_id: UUID, count: int) -> LuckyDrawChance:
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidArgumentError("Count to award must be a positive integer")

        await self.ensure(user_id)
        stmt = (
            update(LuckyDrawChance)
            .where(LuckyDrawChance.user_id == user_id)
            .values(
                total_awarded=LuckyDrawChance.total_awarded + count,
                updated_at=self._clock(),
            )
            .execution_options(synchronize_session=False)
        )
        await self._db.execute(stmt)
        entry = await self.ensure(user_id)
        logger.info(
            "Awarded lucky draw chances",
            user_id=str(user_id),
            count=count,
            total_awarded=entry.total_awarded,
        )
        return entry

    async def consume_one(self, user_id: UUID) -> LuckyDrawChance:
        """Increment ``total_used``; the guard keeps it from passing ``total_awarded``."""

        stmt = (
            update(LuckyDrawChance)
            .where(
                LuckyDrawChance.user_id == user_id,
                LuckyDrawChance.total_used < LuckyDrawChance.total_awarded,
            )
            .values(
                total_used=LuckyDrawChance.total_used + 1,
                updated_at=self._clock(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)
        if result.rowcount != 1:
            raise InsufficientChancesError()

        entry = await self.get(user_id)
        if entry is None:  # pragma: no cover - the update above matched the row
            raise InsufficientChancesError()
        return entry

    async def _insert_if_missing(self, user_id: UUID) -> None:
        now = self._clock()
        values = {
            "id": uuid4(),
            "user_id": user_id,
            "total_awarded": 0,
            "total_used": 0,
            "created_at": now,
            "updated_at": now,
        }

        dialect_name = self._db.get_bind().dialect.name
        insert_factory = _UPSERT_DIALECTS.get(dialect_name)
        if insert_factory is not None:
            stmt = (
                insert_factory(LuckyDrawChance.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["user_id"])
            )
            result = await self._db.execute(stmt)
            if result.rowcount:
                logger.info("Created lucky draw chance ledger", user_id=str(user_id))
            return

        try:
            async with self._db.begin_nested():
                self._db.add(LuckyDrawChance(**values))
        except IntegrityError:
            logger.warning("Detected race when creating chance ledger", user_id=str(user_id))


__all__ = ["ChanceLedger"]
