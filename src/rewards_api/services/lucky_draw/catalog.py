"""Read access to the prize catalog."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.models.lucky_draw import LuckyDrawPrize

from .errors import NoPrizesConfiguredError


class PrizeCatalog:
    """Loads prizes in their stable order (ascending id)."""

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session

    async def list_active(self) -> list[LuckyDrawPrize]:
        stmt = (
            select(LuckyDrawPrize)
            .where(LuckyDrawPrize.is_active.is_(True))
            .order_by(LuckyDrawPrize.id.asc())
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def list_available(self) -> tuple[LuckyDrawPrize, ...]:
        """Active prizes that are unlimited or still have stock.

        The returned tuple is a point-in-time snapshot; stock may move before
        a reservation is attempted.
        """

        prizes = await self.list_active()
        available = tuple(prize for prize in prizes if prize.is_available)
        if not available:
            raise NoPrizesConfiguredError()
        return available

    async def get(self, prize_id: int) -> LuckyDrawPrize | None:
        stmt = (
            select(LuckyDrawPrize)
            .where(LuckyDrawPrize.id == prize_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()


__all__ = ["PrizeCatalog"]
