"""SQLAlchemy models package."""

from .user import User  # noqa: F401
from .discount_code import DiscountCode, DiscountCodeType  # noqa: F401
from .monthly_card import MonthlyCard, MonthlyCardPlanType, MonthlyCardStatus  # noqa: F401
from .lucky_draw import LuckyDrawChance, LuckyDrawPrize, LuckyDrawRecord  # noqa: F401
