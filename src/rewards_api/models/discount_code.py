"""Discount codes issued to members and mirrored into the retail system."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    String,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.dialects.postgresql import UUID

from rewards_api.db.base import Base


class DiscountCodeType(str, Enum):
    """Why a discount code was issued."""

    SHAREHOLDER_REWARD = "shareholder_reward"
    SUPER_SHAREHOLDER_REWARD = "super_shareholder_reward"
    SWEETS_CREDITS_REWARD = "sweets_credits_reward"
    FREE_TOPPING = "free_topping"


class DiscountCode(Base):
    __tablename__ = "discount_codes"
    __table_args__ = (
        UniqueConstraint("code", name="uq_discount_codes_code"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String(16), nullable=False)
    discount_amount = Column(BigInteger, nullable=False)
    code_type = Column(
        SqlEnum(
            DiscountCodeType,
            name="discount_code_type",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    is_used = Column(Boolean, nullable=False, default=False, server_default=false())
    used_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    external_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
