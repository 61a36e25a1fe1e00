"""Create users, discount codes and monthly cards."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


discount_code_type = sa.Enum(
    "shareholder_reward",
    "super_shareholder_reward",
    "sweets_credits_reward",
    "free_topping",
    name="discount_code_type",
)
monthly_card_plan_type = sa.Enum("one_time", "subscription", name="monthly_card_plan_type")
monthly_card_status = sa.Enum("pending", "active", "canceled", "expired", name="monthly_card_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("member_code", sa.String(32), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "discount_codes",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("code", sa.String(16), nullable=False),
        sa.Column("discount_amount", sa.BigInteger(), nullable=False),
        sa.Column("code_type", discount_code_type, nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("external_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("code", name="uq_discount_codes_code"),
    )
    op.create_index("ix_discount_codes_user_id", "discount_codes", ["user_id"])

    op.create_table(
        "monthly_cards",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("plan_type", monthly_card_plan_type, nullable=False),
        sa.Column("status", monthly_card_status, nullable=False, server_default="pending"),
        sa.Column("stripe_subscription_id", sa.String(), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_coupon_granted_on", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_monthly_cards_user_id", "monthly_cards", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_monthly_cards_user_id", table_name="monthly_cards")
    op.drop_table("monthly_cards")
    op.drop_index("ix_discount_codes_user_id", table_name="discount_codes")
    op.drop_table("discount_codes")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    monthly_card_status.drop(bind, checkfirst=True)
    monthly_card_plan_type.drop(bind, checkfirst=True)
    discount_code_type.drop(bind, checkfirst=True)
