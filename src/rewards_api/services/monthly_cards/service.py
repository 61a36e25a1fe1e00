"""Monthly membership card activation."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.core.clock import Clock, as_utc, utcnow
from rewards_api.models.monthly_card import MonthlyCard, MonthlyCardPlanType, MonthlyCardStatus


class MonthlyCardService:
    def __init__(self, db_session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self._db = db_session
        self._clock = clock

    async def activate_credit(
        self,
        user_id: UUID,
        *,
        starts_now: bool = True,
        duration_days: int = 30,
    ) -> MonthlyCard:
        """Grant a one-time card.

        With ``starts_now=False`` the card is queued behind the user's latest
        active card instead of overlapping it.
        """

        if duration_days <= 0:
            raise ValueError("duration_days must be positive")

        now = self._clock()
        starts_at = now
        if not starts_now:
            latest = await self._latest_active_card(user_id)
            if latest is not None and latest.ends_at is not None:
                starts_at = max(now, as_utc(latest.ends_at))

        card = MonthlyCard(
            user_id=user_id,
            plan_type=MonthlyCardPlanType.ONE_TIME,
            status=MonthlyCardStatus.ACTIVE,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(days=duration_days),
            created_at=now,
            updated_at=now,
        )
        self._db.add(card)
        await self._db.flush()

        logger.info(
            "Activated monthly card credit",
            user_id=str(user_id),
            card_id=str(card.id),
            starts_at=starts_at.isoformat(),
            duration_days=duration_days,
        )
        return card

    async def get_active_card(self, user_id: UUID, *, at: datetime | None = None) -> MonthlyCard | None:
        moment = at or self._clock()
        stmt = (
            select(MonthlyCard)
            .where(
                MonthlyCard.user_id == user_id,
                MonthlyCard.status == MonthlyCardStatus.ACTIVE,
                MonthlyCard.starts_at <= moment,
                MonthlyCard.ends_at > moment,
            )
            .order_by(MonthlyCard.ends_at.desc())
            .limit(1)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def _latest_active_card(self, user_id: UUID) -> MonthlyCard | None:
        stmt = (
            select(MonthlyCard)
            .where(
                MonthlyCard.user_id == user_id,
                MonthlyCard.status == MonthlyCardStatus.ACTIVE,
            )
            .order_by(MonthlyCard.ends_at.desc())
            .limit(1)
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()


__all__ = ["MonthlyCardService"]
