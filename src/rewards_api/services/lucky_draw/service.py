"""Lucky-draw orchestration: chances, catalog, spins and history."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.core.clock import Clock, utcnow
from rewards_api.core.settings import settings
from rewards_api.models.lucky_draw import LuckyDrawChance, LuckyDrawPrize, LuckyDrawRecord
from rewards_api.observability.lucky_draw import LuckyDrawObservabilityStore, get_lucky_draw_store
from rewards_api.services.retail.client import RetailApiError

from .catalog import PrizeCatalog
from .errors import InsufficientChancesError, LuckyDrawError
from .fulfillment import (
    DiscountCodeIssuer,
    FulfillmentOutcome,
    RewardFulfillment,
    SubscriptionCreditIssuer,
)
from .ledger import ChanceLedger
from .reservation import StockReservation
from .selector import RandomSource, default_random_source


class SpinState(str, Enum):
    """Last step a spin completed; reported when a spin is rolled back."""

    START = "start"
    CHANCE_CHECKED = "chance_checked"
    PRIZE_SELECTED = "prize_selected"
    STOCK_COMMITTED = "stock_committed"
    RECORD_WRITTEN = "record_written"
    CHANCE_CONSUMED = "chance_consumed"
    REWARD_FULFILLED = "reward_fulfilled"
    COMMITTED = "committed"


@dataclass
class SpinResult:
    prize: LuckyDrawPrize
    record: LuckyDrawRecord
    remaining_chances: int
    fulfillment: FulfillmentOutcome
    attempts: int = 1


class LuckyDrawService:
    """Runs each spin as one transaction on the injected session.

    Either every effect of a spin is committed (stock, audit record, consumed
    chance, reward) or the session is rolled back and nothing is.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        discount_codes: DiscountCodeIssuer,
        monthly_cards: SubscriptionCreditIssuer,
        rng: RandomSource | None = None,
        clock: Clock = utcnow,
        catalog: PrizeCatalog | None = None,
        ledger: ChanceLedger | None = None,
        store: LuckyDrawObservabilityStore | None = None,
        max_selection_attempts: int | None = None,
        coupon_validity_months: int | None = None,
        subscription_credit_days: int | None = None,
    ) -> None:
        self._db = db_session
        self._clock = clock
        self._store = store or get_lucky_draw_store()
        self._ledger = ledger or ChanceLedger(db_session, clock=clock)
        self._catalog = catalog or PrizeCatalog(db_session)
        self._reservation = StockReservation(
            db_session,
            rng=rng or default_random_source(),
            max_attempts=max_selection_attempts or settings.lucky_draw_max_selection_attempts,
            clock=clock,
            store=self._store,
        )
        self._fulfillment = RewardFulfillment(
            discount_codes=discount_codes,
            monthly_cards=monthly_cards,
            coupon_validity_months=coupon_validity_months or settings.lucky_draw_coupon_validity_months,
            subscription_credit_days=subscription_credit_days or settings.lucky_draw_subscription_credit_days,
            store=self._store,
        )

    async def get_user_chances(self, user_id: UUID) -> LuckyDrawChance:
        entry = await self._ledger.ensure(user_id)
        await self._db.commit()
        return entry

    async def award_chances(self, user_id: UUID, count: int) -> LuckyDrawChance:
        try:
            entry = await self._ledger.award(user_id, count)
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            raise
        return entry

    async def list_prizes(self) -> list[LuckyDrawPrize]:
        return await self._catalog.list_active()

    async def list_records(
        self,
        user_id: UUID,
        *,
        limit: int,
        offset: int,
    ) -> tuple[list[LuckyDrawRecord], int]:
        total_stmt = (
            select(func.count())
            .select_from(LuckyDrawRecord)
            .where(LuckyDrawRecord.user_id == user_id)
        )
        total = int((await self._db.execute(total_stmt)).scalar_one())

        stmt = (
            select(LuckyDrawRecord)
            .where(LuckyDrawRecord.user_id == user_id)
            .order_by(LuckyDrawRecord.created_at.desc(), LuckyDrawRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all()), total

    async def spin(self, user_id: UUID) -> SpinResult:
        state = SpinState.START

        def mark_selected(_prize: LuckyDrawPrize) -> None:
            nonlocal state
            state = SpinState.PRIZE_SELECTED

        try:
            entry = await self._ledger.ensure(user_id)
            if entry.remaining <= 0:
                raise InsufficientChancesError()
            state = SpinState.CHANCE_CHECKED

            candidates = await self._catalog.list_available()
            secured = await self._reservation.secure(candidates, on_selected=mark_selected)
            prize = secured.prize
            state = SpinState.STOCK_COMMITTED

            record = LuckyDrawRecord(
                user_id=user_id,
                prize_id=prize.id,
                prize_name=prize.name,
                value_cents=prize.value_cents,
                created_at=self._clock(),
            )
            self._db.add(record)
            await self._db.flush()
            state = SpinState.RECORD_WRITTEN

            entry = await self._ledger.consume_one(user_id)
            state = SpinState.CHANCE_CONSUMED

            outcome = await self._fulfillment.fulfill(user_id, prize)
            state = SpinState.REWARD_FULFILLED

            await self._db.commit()
            state = SpinState.COMMITTED
        except LuckyDrawError as exc:
            await self._db.rollback()
            self._store.record_failure(exc.code)
            log = logger.warning if exc.user_actionable else logger.error
            log(
                "Lucky draw spin rejected",
                user_id=str(user_id),
                code=exc.code,
                state=state.value,
                reason=str(exc),
            )
            raise
        except Exception as exc:
            await self._db.rollback()
            code = exc.code if isinstance(exc, RetailApiError) else "INTERNAL_ERROR"
            self._store.record_failure(code)
            logger.exception("Lucky draw spin failed", user_id=str(user_id), code=code, state=state.value)
            raise

        self._store.record_spin(prize.name)
        logger.info(
            "Lucky draw spin completed",
            user_id=str(user_id),
            prize_id=prize.id,
            prize_name=prize.name,
            fulfillment=outcome.kind.value,
            remaining_chances=entry.remaining,
            attempts=secured.attempts,
        )
        return SpinResult(
            prize=prize,
            record=record,
            remaining_chances=entry.remaining,
            fulfillment=outcome,
            attempts=secured.attempts,
        )


__all__ = ["LuckyDrawService", "SpinResult", "SpinState"]
