"""Weighted selection combined with conditional stock decrements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from loguru import logger
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.core.clock import Clock, utcnow
from rewards_api.models.lucky_draw import LuckyDrawPrize
from rewards_api.observability.lucky_draw import LuckyDrawObservabilityStore, get_lucky_draw_store

from .catalog import PrizeCatalog
from .errors import StockSelectionExhaustedError
from .selector import RandomSource, select_weighted


@dataclass(frozen=True)
class SecuredPrize:
    prize: LuckyDrawPrize
    attempts: int


class StockReservation:
    """Select a prize and make sure one unit of it is held for the current spin.

    Limited prizes are claimed with a compare-and-decrement UPDATE. When the
    update matches no row the prize lost a race; it is dropped from the
    candidate set and selection runs again over the survivors.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        rng: RandomSource,
        max_attempts: int,
        catalog: PrizeCatalog | None = None,
        clock: Clock = utcnow,
        store: LuckyDrawObservabilityStore | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._db = db_session
        self._rng = rng
        self._max_attempts = max_attempts
        self._catalog = catalog or PrizeCatalog(db_session)
        self._clock = clock
        self._store = store or get_lucky_draw_store()

    async def secure(
        self,
        candidates: Sequence[LuckyDrawPrize],
        *,
        on_selected: Callable[[LuckyDrawPrize], None] | None = None,
    ) -> SecuredPrize:
        """Pick and hold a prize; ``on_selected`` runs after each pick, before the stock claim."""

        pool = tuple(candidates)
        if not pool:
            raise StockSelectionExhaustedError("No prize available to draw from")

        for attempt in range(1, self._max_attempts + 1):
            chosen = select_weighted(pool, self._rng)
            if on_selected is not None:
                on_selected(chosen)
            if not chosen.is_limited:
                return SecuredPrize(prize=chosen, attempts=attempt)

            if await self._try_decrement(chosen.id):
                committed = await self._catalog.get(chosen.id)
                if committed is None:
                    raise StockSelectionExhaustedError(f"Prize {chosen.id} vanished after reservation")
                logger.info(
                    "Reserved limited lucky draw prize",
                    prize_id=committed.id,
                    prize_name=committed.name,
                    stock_remaining=committed.stock_remaining,
                    attempt=attempt,
                )
                return SecuredPrize(prize=committed, attempts=attempt)

            logger.info(
                "Lucky draw prize stock taken concurrently",
                prize_id=chosen.id,
                prize_name=chosen.name,
                attempt=attempt,
            )
            self._store.record_stock_contention(chosen.name)
            pool = tuple(prize for prize in pool if prize.id != chosen.id)
            if not pool:
                raise StockSelectionExhaustedError("Every candidate prize ran out of stock during the draw")

        raise StockSelectionExhaustedError(
            f"Failed to secure a prize after {self._max_attempts} attempts"
        )

    async def _try_decrement(self, prize_id: int) -> bool:
        stmt = (
            update(LuckyDrawPrize)
            .where(
                LuckyDrawPrize.id == prize_id,
                LuckyDrawPrize.stock_remaining.is_not(None),
                LuckyDrawPrize.stock_remaining > 0,
            )
            .values(
                stock_remaining=LuckyDrawPrize.stock_remaining - 1,
                updated_at=self._clock(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)
        return result.rowcount == 1


__all__ = ["SecuredPrize", "StockReservation"]
