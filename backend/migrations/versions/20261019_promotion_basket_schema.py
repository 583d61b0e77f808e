"""Promotion basket schema

Revision ID: 20261019_promotion_basket
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_promotion_basket"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "shops",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("currency_factor", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_number", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("net_price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("tax_rate_bps", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("in_stock", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_stock", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("articles", schema=None) as batch_op:
        batch_op.create_index("ix_articles_order_number", ["order_number"], unique=True)
        batch_op.create_index("ix_articles_is_active", ["is_active"], unique=False)

    op.create_table(
        "vouchers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("voucher_code", sa.String(100), nullable=True),
        sa.Column("mode", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("vouchers", schema=None) as batch_op:
        batch_op.create_index("ix_vouchers_voucher_code", ["voucher_code"], unique=False)

    op.create_table(
        "voucher_codes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("voucher_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(100), nullable=False),
        sa.Column("cashed", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["voucher_id"], ["vouchers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_voucher_codes_code"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("voucher_codes", schema=None) as batch_op:
        batch_op.create_index("ix_voucher_codes_voucher_id", ["voucher_id"], unique=False)
        batch_op.create_index("ix_voucher_codes_cashed", ["cashed"], unique=False)

    op.create_table(
        "promotions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=True),
        sa.Column("customer_group_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("number", sa.String(64), nullable=True),
        sa.Column("promo_type", sa.String(32), nullable=False),
        sa.Column("discount_value", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("min_amount_cents", sa.Integer(), nullable=True),
        sa.Column("max_usage_per_customer", sa.Integer(), nullable=True),
        sa.Column("free_goods_max_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("free_goods_badge", sa.String(64), nullable=True),
        sa.Column("shipping_free", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("voucher_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["shop_id"], ["shops.id"]),
        sa.ForeignKeyConstraint(["voucher_id"], ["vouchers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("voucher_id", name="uq_promotions_voucher"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("promotions", schema=None) as batch_op:
        batch_op.create_index("ix_promotions_shop_id", ["shop_id"], unique=False)
        batch_op.create_index("ix_promotions_is_active", ["is_active"], unique=False)

    op.create_table(
        "promotion_free_goods",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("promotion_id", sa.Integer(), nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["promotion_id"], ["promotions.id"]),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("promotion_id", "article_id", name="uq_promotion_free_goods"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("promotion_free_goods", schema=None) as batch_op:
        batch_op.create_index("ix_promotion_free_goods_promotion_id", ["promotion_id"], unique=False)

    op.create_table(
        "promotion_customer_counts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("promotion_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["promotion_id"], ["promotions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("promotion_customer_counts", schema=None) as batch_op:
        batch_op.create_index("ix_promotion_customer_counts_order_id", ["order_id"], unique=False)
        batch_op.create_index(
            "ix_promotion_customer_counts_promotion_customer", ["promotion_id", "customer_id"], unique=False
        )

    op.create_table(
        "basket_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("article_id", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("article_name", sa.String(255), nullable=False),
        sa.Column("order_number", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("net_price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("tax_rate_bps", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("mode", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("currency_factor", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.Column("shipping_free", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("basket_lines", schema=None) as batch_op:
        batch_op.create_index("ix_basket_lines_session_id", ["session_id"], unique=False)
        batch_op.create_index("ix_basket_lines_session_mode", ["session_id", "mode"], unique=False)

    op.create_table(
        "basket_line_attributes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("basket_line_id", sa.Integer(), nullable=False),
        sa.Column("promotion_id", sa.Integer(), nullable=True),
        sa.Column("item_discount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("direct_item_discount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("direct_promotions", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["basket_line_id"], ["basket_lines.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("basket_line_id", name="uq_basket_line_attributes_line"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("basket_line_attributes", schema=None) as batch_op:
        batch_op.create_index("ix_basket_line_attributes_basket_line_id", ["basket_line_id"], unique=False)
        batch_op.create_index("ix_basket_line_attributes_promotion_id", ["promotion_id"], unique=False)

    op.create_table(
        "basket_free_good_links",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("basket_line_id", sa.Integer(), nullable=False),
        sa.Column("promotion_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["basket_line_id"], ["basket_lines.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("basket_line_id", "promotion_id", name="uq_free_good_links_line_promotion"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("basket_free_good_links", schema=None) as batch_op:
        batch_op.create_index("ix_basket_free_good_links_basket_line_id", ["basket_line_id"], unique=False)

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("orders", schema=None) as batch_op:
        batch_op.create_index("ix_orders_session_id", ["session_id"], unique=False)

    op.create_table(
        "shopper_session_values",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "key", name="uq_shopper_session_values_key"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("shopper_session_values", schema=None) as batch_op:
        batch_op.create_index("ix_shopper_session_values_session_id", ["session_id"], unique=False)


def downgrade():
    op.drop_table("shopper_session_values")
    op.drop_table("orders")
    op.drop_table("basket_free_good_links")
    op.drop_table("basket_line_attributes")
    op.drop_table("basket_lines")
    op.drop_table("promotion_customer_counts")
    op.drop_table("promotion_free_goods")
    op.drop_table("promotions")
    op.drop_table("voucher_codes")
    op.drop_table("vouchers")
    op.drop_table("articles")
    op.drop_table("shops")
