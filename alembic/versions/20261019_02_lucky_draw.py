"""Add lucky draw chances, prizes and records; seed the prize catalog."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_02"
down_revision: Union[str, None] = "20261019_01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_BIGINT_PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "lucky_draw_chances",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("total_awarded", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_used", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", name="uq_lucky_draw_chances_user_id"),
        sa.CheckConstraint("total_used >= 0", name="ck_lucky_draw_chances_used_non_negative"),
        sa.CheckConstraint("total_used <= total_awarded", name="ck_lucky_draw_chances_used_within_awarded"),
    )

    prizes = op.create_table(
        "lucky_draw_prizes",
        sa.Column("id", _BIGINT_PK, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("value_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("probability_bp", sa.Integer(), nullable=False),
        sa.Column("stock_limit", sa.BigInteger(), nullable=True),
        sa.Column("stock_remaining", sa.BigInteger(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("name", name="uq_lucky_draw_prizes_name"),
        sa.CheckConstraint("probability_bp >= 0", name="ck_lucky_draw_prizes_probability_non_negative"),
        sa.CheckConstraint(
            "stock_remaining IS NULL OR stock_remaining >= 0",
            name="ck_lucky_draw_prizes_stock_non_negative",
        ),
        sa.CheckConstraint(
            "stock_limit IS NULL OR stock_remaining IS NULL OR stock_remaining <= stock_limit",
            name="ck_lucky_draw_prizes_stock_within_limit",
        ),
    )

    op.create_table(
        "lucky_draw_records",
        sa.Column("id", _BIGINT_PK, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("prize_id", sa.BigInteger(), nullable=False),
        sa.Column("prize_name", sa.String(255), nullable=False),
        sa.Column("value_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_lucky_draw_records_user_id", "lucky_draw_records", ["user_id"])

    # Weights total 10000 basis points.
    op.bulk_insert(
        prizes,
        [
            {"name": "Free Topping Coupon", "value_cents": 50, "probability_bp": 4500, "stock_limit": None, "stock_remaining": None, "is_active": True},
            {"name": "Free Original Ice Cream Coupon", "value_cents": 500, "probability_bp": 800, "stock_limit": None, "stock_remaining": None, "is_active": True},
            {"name": "Membership Monthly Card", "value_cents": 0, "probability_bp": 50, "stock_limit": 5, "stock_remaining": 5, "is_active": True},
            {"name": "Half Price Ice Cream Coupon", "value_cents": 250, "probability_bp": 1200, "stock_limit": None, "stock_remaining": None, "is_active": True},
            {"name": "Thank You", "value_cents": 0, "probability_bp": 3450, "stock_limit": None, "stock_remaining": None, "is_active": True},
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_lucky_draw_records_user_id", table_name="lucky_draw_records")
    op.drop_table("lucky_draw_records")
    op.drop_table("lucky_draw_prizes")
    op.drop_table("lucky_draw_chances")
