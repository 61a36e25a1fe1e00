"""Turn a won prize into the concrete reward the member receives."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Protocol
from uuid import UUID

from loguru import logger

from rewards_api.models.discount_code import DiscountCode, DiscountCodeType
from rewards_api.models.lucky_draw import LuckyDrawPrize
from rewards_api.models.monthly_card import MonthlyCard
from rewards_api.observability.lucky_draw import LuckyDrawObservabilityStore, get_lucky_draw_store


class FulfillmentKind(str, Enum):
    COUPON = "coupon"
    SUBSCRIPTION_CREDIT = "subscription_credit"
    NONE = "none"
    UNROUTED = "unrouted"


@dataclass(frozen=True)
class PrizeRoute:
    kind: FulfillmentKind
    code_type: DiscountCodeType | None = None


# Keyed by prize name. Coupons carry the prize face value.
DEFAULT_PRIZE_ROUTES: Mapping[str, PrizeRoute] = {
    "Free Topping Coupon": PrizeRoute(FulfillmentKind.COUPON, DiscountCodeType.FREE_TOPPING),
    "Free Original Ice Cream Coupon": PrizeRoute(FulfillmentKind.COUPON, DiscountCodeType.SWEETS_CREDITS_REWARD),
    "Half Price Ice Cream Coupon": PrizeRoute(FulfillmentKind.COUPON, DiscountCodeType.SWEETS_CREDITS_REWARD),
    "Membership Monthly Card": PrizeRoute(FulfillmentKind.SUBSCRIPTION_CREDIT),
    "Thank You": PrizeRoute(FulfillmentKind.NONE),
}


class DiscountCodeIssuer(Protocol):
    async def create_discount_code(
        self,
        user_id: UUID,
        amount_cents: int,
        code_type: DiscountCodeType,
        validity_months: int,
    ) -> DiscountCode:  # pragma: no cover - protocol
        ...


class SubscriptionCreditIssuer(Protocol):
    async def activate_credit(
        self,
        user_id: UUID,
        *,
        starts_now: bool = True,
        duration_days: int = 30,
    ) -> MonthlyCard:  # pragma: no cover - protocol
        ...


@dataclass
class FulfillmentOutcome:
    kind: FulfillmentKind
    discount_code: DiscountCode | None = None
    monthly_card: MonthlyCard | None = None


class RewardFulfillment:
    """Dispatch on prize name; unknown names are logged and skipped."""

    def __init__(
        self,
        *,
        discount_codes: DiscountCodeIssuer,
        monthly_cards: SubscriptionCreditIssuer,
        coupon_validity_months: int = 1,
        subscription_credit_days: int = 30,
        routes: Mapping[str, PrizeRoute] | None = None,
        store: LuckyDrawObservabilityStore | None = None,
    ) -> None:
        self._discount_codes = discount_codes
        self._monthly_cards = monthly_cards
        self._coupon_validity_months = coupon_validity_months
        self._subscription_credit_days = subscription_credit_days
        self._routes = dict(DEFAULT_PRIZE_ROUTES if routes is None else routes)
        self._store = store or get_lucky_draw_store()

    def route_for(self, prize_name: str) -> PrizeRoute | None:
        return self._routes.get(prize_name)

    async def fulfill(self, user_id: UUID, prize: LuckyDrawPrize) -> FulfillmentOutcome:
        route = self.route_for(prize.name)

        if route is None:
            logger.warning(
                "Lucky draw prize has no fulfillment route",
                prize_id=prize.id,
                prize_name=prize.name,
                user_id=str(user_id),
            )
            self._store.record_unrouted_prize(prize.name)
            outcome = FulfillmentOutcome(kind=FulfillmentKind.UNROUTED)

        elif route.kind is FulfillmentKind.COUPON:
            assert route.code_type is not None
            discount_code = await self._discount_codes.create_discount_code(
                user_id,
                int(prize.value_cents),
                route.code_type,
                self._coupon_validity_months,
            )
            outcome = FulfillmentOutcome(kind=route.kind, discount_code=discount_code)

        elif route.kind is FulfillmentKind.SUBSCRIPTION_CREDIT:
            card = await self._monthly_cards.activate_credit(
                user_id,
                starts_now=True,
                duration_days=self._subscription_credit_days,
            )
            outcome = FulfillmentOutcome(kind=route.kind, monthly_card=card)

        else:
            outcome = FulfillmentOutcome(kind=FulfillmentKind.NONE)

        self._store.record_fulfillment(outcome.kind.value)
        return outcome


__all__ = [
    "DEFAULT_PRIZE_ROUTES",
    "FulfillmentKind",
    "FulfillmentOutcome",
    "PrizeRoute",
    "RewardFulfillment",
]
