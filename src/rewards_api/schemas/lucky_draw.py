from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LuckyDrawChancesResponse(BaseModel):
    total_awarded: int
    total_used: int
    remaining: int


class LuckyDrawPrizeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    value_cents: int
    probability_bp: int
    stock_limit: int | None = None
    stock_remaining: int | None = None
    is_active: bool


class LuckyDrawRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    prize_id: int
    prize_name: str
    value_cents: int
    created_at: datetime


class WonPrize(BaseModel):
    id: int
    name: str
    value_cents: int


class SpinResponse(BaseModel):
    prize: WonPrize
    remaining_chances: int


class AwardChancesRequest(BaseModel):
    count: int = Field(..., description="Number of chances to add; must be positive")
