from datetime import datetime

from pydantic import BaseModel, ConfigDict

from rewards_api.models.discount_code import DiscountCodeType


class DiscountCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    discount_amount: int
    code_type: DiscountCodeType
    is_used: bool
    used_at: datetime | None = None
    expires_at: datetime
    created_at: datetime | None = None
