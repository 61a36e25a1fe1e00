"""Issue and list member discount codes."""

from __future__ import annotations

from datetime import timedelta
from typing import Callable
from uuid import UUID

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.core.clock import Clock, utcnow
from rewards_api.models.discount_code import DiscountCode, DiscountCodeType
from rewards_api.services.retail.client import RetailApiClient

from .codes import generate_six_digit_code


MAX_CODE_ATTEMPTS = 10
DAYS_PER_VALIDITY_MONTH = 30


class DiscountCodeError(RuntimeError):
    """Raised when a discount code cannot be issued."""


class DiscountCodeService:
    """Creates codes locally and, when configured, registers them with the retail API.

    Codes are written inside the caller's transaction and never committed here.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        *,
        retail_client: RetailApiClient | None = None,
        clock: Clock = utcnow,
        code_generator: Callable[[], str] = generate_six_digit_code,
    ) -> None:
        self._db = db_session
        self._retail_client = retail_client
        self._clock = clock
        self._code_generator = code_generator

    async def create_discount_code(
        self,
        user_id: UUID,
        amount_cents: int,
        code_type: DiscountCodeType,
        validity_months: int,
    ) -> DiscountCode:
        if amount_cents <= 0:
            raise DiscountCodeError("Discount amount must be positive")
        if not 1 <= validity_months <= 3:
            raise DiscountCodeError("Validity must be between 1 and 3 months")

        code = await self._allocate_code()
        now = self._clock()

        if self._retail_client is not None:
            await self._retail_client.register_discount_code(
                code,
                amount_cents=amount_cents,
                validity_months=validity_months,
            )
        else:
            logger.info("Retail API disabled; issuing discount code locally", user_id=str(user_id))

        discount_code = DiscountCode(
            user_id=user_id,
            code=code,
            discount_amount=amount_cents,
            code_type=code_type,
            is_used=False,
            expires_at=now + timedelta(days=DAYS_PER_VALIDITY_MONTH * validity_months),
            created_at=now,
            updated_at=now,
        )
        self._db.add(discount_code)
        try:
            await self._db.flush()
        except IntegrityError as exc:
            raise DiscountCodeError("Discount code collided with an existing code") from exc

        logger.info(
            "Issued discount code",
            user_id=str(user_id),
            code_type=code_type.value,
            amount_cents=amount_cents,
            validity_months=validity_months,
        )
        return discount_code

    async def list_user_discount_codes(
        self,
        user_id: UUID,
        *,
        limit: int,
        offset: int,
    ) -> tuple[list[DiscountCode], int]:
        total_stmt = select(func.count()).select_from(DiscountCode).where(DiscountCode.user_id == user_id)
        total = int((await self._db.execute(total_stmt)).scalar_one())

        stmt = (
            select(DiscountCode)
            .where(DiscountCode.user_id == user_id)
            .order_by(DiscountCode.created_at.desc(), DiscountCode.code.asc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all()), total

    async def _allocate_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            candidate = self._code_generator()
            stmt = select(DiscountCode.id).where(DiscountCode.code == candidate)
            existing = (await self._db.execute(stmt)).scalar_one_or_none()
            if existing is None:
                return candidate
        raise DiscountCodeError("Failed to generate a unique discount code")


__all__ = ["DiscountCodeError", "DiscountCodeService", "MAX_CODE_ATTEMPTS"]
