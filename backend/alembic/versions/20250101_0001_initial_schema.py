"""initial schema

Revision ID: 20250101_0001
Revises:
Create Date: 2025-01-01
"""

from alembic import op
import sqlalchemy as sa


revision = "20250101_0001"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.String(length=36),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("profile_picture_url", sa.String(length=500)),
        sa.Column("address_city", sa.String(length=100)),
        sa.Column("address_street", sa.String(length=200)),
        sa.Column("address_number", sa.String(length=20)),
        sa.Column("address_details", sa.String(length=500)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "refresh_tokens",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        _timestamp("expires_at"),
        _timestamp("revoked_at", nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])
    op.create_index("ix_refresh_tokens_token_hash", "refresh_tokens", ["token_hash"], unique=True)

    op.create_table(
        "menu_items",
        _id(),
        sa.Column("name", sa.String(length=30), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.String(length=400)),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("image_url", sa.String(length=500)),
        sa.Column("allergens", sa.JSON(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_menu_items_name", "menu_items", ["name"])
    op.create_index("ix_menu_items_category", "menu_items", ["category"])

    op.create_table(
        "menu_item_reviews",
        _id(),
        _fk("menu_item_id", "menu_items.id"),
        _fk("user_id", "users.id"),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("comment", sa.Text()),
        _timestamp("created_at"),
        _timestamp("updated_at", nullable=True),
        sa.UniqueConstraint("menu_item_id", "user_id", name="uq_review_menu_item_user"),
        sa.CheckConstraint("rating >= 1.0 AND rating <= 5.0", name="ck_review_rating_range"),
    )
    op.create_index("ix_menu_item_reviews_menu_item_id", "menu_item_reviews", ["menu_item_id"])
    op.create_index("ix_menu_item_reviews_user_id", "menu_item_reviews", ["user_id"])

    op.create_table(
        "orders",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text()),
        _timestamp("created_at"),
        _timestamp("updated_at", nullable=True),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "order_items",
        _id(),
        _fk("order_id", "orders.id"),
        _fk("menu_item_id", "menu_items.id", ondelete="SET NULL", nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_index("ix_order_items_menu_item_id", "order_items", ["menu_item_id"])

    op.create_table(
        "kitchen_tasks",
        _id(),
        _fk("order_id", "orders.id"),
        sa.Column("assigned_to", sa.String(length=100), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("notes", sa.String(length=100)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_kitchen_tasks_order_id", "kitchen_tasks", ["order_id"])

    op.create_table(
        "payments",
        _id(),
        _fk("user_id", "users.id"),
        _fk("order_id", "orders.id", ondelete="SET NULL", nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("stripe_session_id", sa.String(length=255)),
        _timestamp("created_at"),
        _timestamp("completed_at", nullable=True),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_stripe_session_id", "payments", ["stripe_session_id"])

    op.create_table(
        "loyalty_accounts",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("points", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("points >= 0", name="ck_loyalty_points_non_negative"),
    )
    op.create_index("ix_loyalty_accounts_user_id", "loyalty_accounts", ["user_id"], unique=True)

    op.create_table(
        "loyalty_transactions",
        _id(),
        _fk("loyalty_account_id", "loyalty_accounts.id"),
        sa.Column("points_change", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("related_order_id", sa.String(length=36)),
        _timestamp("created_at"),
    )
    op.create_index(
        "ix_loyalty_transactions_loyalty_account_id",
        "loyalty_transactions",
        ["loyalty_account_id"],
    )
    op.create_index(
        "ix_loyalty_transactions_related_order_id", "loyalty_transactions", ["related_order_id"]
    )
    op.create_index("ix_loyalty_transactions_created_at", "loyalty_transactions", ["created_at"])

    op.create_table(
        "coupons",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("discount_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("points_cost", sa.Integer(), nullable=False),
        _fk("specific_menu_item_id", "menu_items.id", ondelete="SET NULL", nullable=True),
        sa.Column("minimum_order_amount", sa.Numeric(10, 2)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _timestamp("expires_at", nullable=True),
        _timestamp("created_at"),
    )

    op.create_table(
        "user_coupons",
        _id(),
        _fk("user_id", "users.id"),
        _fk("coupon_id", "coupons.id"),
        _timestamp("acquired_at"),
        _timestamp("expires_at", nullable=True),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        _timestamp("used_at", nullable=True),
        sa.Column("used_in_order_id", sa.String(length=36)),
    )
    op.create_index("ix_user_coupons_user_id", "user_coupons", ["user_id"])
    op.create_index("ix_user_coupons_coupon_id", "user_coupons", ["coupon_id"])

    op.create_table(
        "ingredients",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("current_stock", sa.Numeric(12, 3), nullable=False),
        sa.Column("low_stock_threshold", sa.Numeric(12, 3), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_ingredients_name", "ingredients", ["name"], unique=True)

    op.create_table(
        "stock_transactions",
        _id(),
        _fk("ingredient_id", "ingredients.id"),
        sa.Column("quantity_changed", sa.Numeric(12, 3), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("note", sa.String(length=200)),
        _timestamp("created_at"),
    )
    op.create_index("ix_stock_transactions_ingredient_id", "stock_transactions", ["ingredient_id"])


def downgrade() -> None:
    op.drop_table("stock_transactions")
    op.drop_table("ingredients")
    op.drop_table("user_coupons")
    op.drop_table("coupons")
    op.drop_table("loyalty_transactions")
    op.drop_table("loyalty_accounts")
    op.drop_table("payments")
    op.drop_table("kitchen_tasks")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("menu_item_reviews")
    op.drop_table("menu_items")
    op.drop_table("refresh_tokens")
    op.drop_table("users")
