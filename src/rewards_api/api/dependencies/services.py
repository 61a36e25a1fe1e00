"""Per-request service wiring."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.db.session import get_session
from rewards_api.services.discount_codes import DiscountCodeService
from rewards_api.services.lucky_draw import LuckyDrawService
from rewards_api.services.lucky_draw.selector import RandomSource, default_random_source
from rewards_api.services.monthly_cards import MonthlyCardService
from rewards_api.services.retail import RetailApiClient


_RANDOM_SOURCE = default_random_source()


def get_random_source() -> RandomSource:
    return _RANDOM_SOURCE


def get_retail_client(request: Request) -> RetailApiClient | None:
    """Shared client created at startup; ``None`` when the retail API is disabled."""

    return getattr(request.app.state, "retail_client", None)


def get_discount_code_service(
    db: AsyncSession = Depends(get_session),
    retail_client: RetailApiClient | None = Depends(get_retail_client),
) -> DiscountCodeService:
    return DiscountCodeService(db, retail_client=retail_client)


def get_lucky_draw_service(
    db: AsyncSession = Depends(get_session),
    discount_codes: DiscountCodeService = Depends(get_discount_code_service),
    rng: RandomSource = Depends(get_random_source),
) -> LuckyDrawService:
    return LuckyDrawService(
        db,
        discount_codes=discount_codes,
        monthly_cards=MonthlyCardService(db),
        rng=rng,
    )
