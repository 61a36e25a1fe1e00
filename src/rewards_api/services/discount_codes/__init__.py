from .codes import generate_six_digit_code
from .service import DiscountCodeError, DiscountCodeService

__all__ = ["DiscountCodeError", "DiscountCodeService", "generate_six_digit_code"]
