"""Lucky-draw chance ledger, prize catalog and draw history models."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.dialects.postgresql import UUID

from rewards_api.db.base import Base, BigIntPrimaryKey


class LuckyDrawChance(Base):
    """Per-user counters of awarded and used draw chances."""

    __tablename__ = "lucky_draw_chances"
    __table_args__ = (
        UniqueConstraint("user_id", name="uq_lucky_draw_chances_user_id"),
        CheckConstraint("total_used >= 0", name="ck_lucky_draw_chances_used_non_negative"),
        CheckConstraint("total_used <= total_awarded", name="ck_lucky_draw_chances_used_within_awarded"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    total_awarded = Column(BigInteger, nullable=False, default=0, server_default="0")
    total_used = Column(BigInteger, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def remaining(self) -> int:
        return int(self.total_awarded or 0) - int(self.total_used or 0)


class LuckyDrawPrize(Base):
    """Catalog entry; ``name`` doubles as the fulfillment routing key."""

    __tablename__ = "lucky_draw_prizes"
    __table_args__ = (
        UniqueConstraint("name", name="uq_lucky_draw_prizes_name"),
        CheckConstraint("probability_bp >= 0", name="ck_lucky_draw_prizes_probability_non_negative"),
        CheckConstraint(
            "stock_remaining IS NULL OR stock_remaining >= 0",
            name="ck_lucky_draw_prizes_stock_non_negative",
        ),
        CheckConstraint(
            "stock_limit IS NULL OR stock_remaining IS NULL OR stock_remaining <= stock_limit",
            name="ck_lucky_draw_prizes_stock_within_limit",
        ),
    )

    id = Column(BigIntPrimaryKey, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    value_cents = Column(BigInteger, nullable=False, default=0, server_default="0")
    probability_bp = Column(Integer, nullable=False)
    stock_limit = Column(BigInteger, nullable=True)
    stock_remaining = Column(BigInteger, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def is_limited(self) -> bool:
        return self.stock_limit is not None

    @property
    def is_available(self) -> bool:
        return bool(self.is_active) and (self.stock_remaining is None or self.stock_remaining > 0)


class LuckyDrawRecord(Base):
    """Append-only audit row written once per successful spin."""

    __tablename__ = "lucky_draw_records"

    id = Column(BigIntPrimaryKey, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    prize_id = Column(BigInteger, nullable=False)
    prize_name = Column(String(255), nullable=False)
    value_cents = Column(BigInteger, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
