"""Monthly membership cards (subscription credit)."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, Enum as SqlEnum, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from rewards_api.db.base import Base


class MonthlyCardPlanType(str, Enum):
    ONE_TIME = "one_time"
    SUBSCRIPTION = "subscription"


class MonthlyCardStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"


class MonthlyCard(Base):
    __tablename__ = "monthly_cards"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_type = Column(
        SqlEnum(
            MonthlyCardPlanType,
            name="monthly_card_plan_type",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    status = Column(
        SqlEnum(
            MonthlyCardStatus,
            name="monthly_card_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=MonthlyCardStatus.PENDING,
        server_default=MonthlyCardStatus.PENDING.value,
    )
    stripe_subscription_id = Column(String, nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    last_coupon_granted_on = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
