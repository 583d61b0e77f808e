from __future__ import annotations

from ..extensions import db


TYPE_FREEGOODS = "FREEGOODS"
TYPE_FREEGOODSBUNDLE = "FREEGOODSBUNDLE"
TYPE_BASKET_PERCENTAGE = "BASKET_PERCENTAGE"
TYPE_BASKET_FIXED = "BASKET_FIXED"

PROMOTION_TYPES = {TYPE_FREEGOODS, TYPE_FREEGOODSBUNDLE, TYPE_BASKET_PERCENTAGE, TYPE_BASKET_FIXED}

# Voucher code schemes
VOUCHER_MODE_SHARED = 0
VOUCHER_MODE_INDIVIDUAL = 1


class Promotion(db.Model):
    """
    Promotion rule.

    Can be shop-wide (shop_id=NULL) or shop-specific. A promotion owns at
    most one voucher; voucher-bound promotions only apply while that voucher
    is active in the shopper's session.
    """
    __tablename__ = "promotions"
    __table_args__ = (
        db.UniqueConstraint("voucher_id", name="uq_promotions_voucher"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=True, index=True)
    customer_group_id = db.Column(db.Integer, nullable=True)  # NULL = all customer groups

    name = db.Column(db.String(255), nullable=False)
    number = db.Column(db.String(64), nullable=True)  # order number of the discount line

    promo_type = db.Column(db.String(32), nullable=False)  # FREEGOODS, FREEGOODSBUNDLE, BASKET_PERCENTAGE, BASKET_FIXED
    discount_value = db.Column(db.Integer, nullable=False, default=0)  # cents for BASKET_FIXED, basis points for BASKET_PERCENTAGE

    min_amount_cents = db.Column(db.Integer, nullable=True)
    max_usage_per_customer = db.Column(db.Integer, nullable=True)

    free_goods_max_quantity = db.Column(db.Integer, nullable=False, default=0)  # 0 = unlimited
    free_goods_badge = db.Column(db.String(64), nullable=True)
    shipping_free = db.Column(db.Boolean, nullable=False, default=False)

    voucher_id = db.Column(db.Integer, db.ForeignKey("vouchers.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    voucher = db.relationship("Voucher", backref=db.backref("promotion", uselist=False))
    free_goods = db.relationship("PromotionFreeGood", lazy=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "customer_group_id": self.customer_group_id,
            "name": self.name,
            "number": self.number,
            "promo_type": self.promo_type,
            "discount_value": self.discount_value,
            "min_amount_cents": self.min_amount_cents,
            "max_usage_per_customer": self.max_usage_per_customer,
            "free_goods_max_quantity": self.free_goods_max_quantity,
            "free_goods_badge": self.free_goods_badge,
            "shipping_free": self.shipping_free,
            "voucher_id": self.voucher_id,
            "is_active": self.is_active,
            "free_goods_article_ids": [fg.article_id for fg in self.free_goods],
        }


class PromotionFreeGood(db.Model):
    """Article offered as a free good by a promotion."""
    __tablename__ = "promotion_free_goods"
    __table_args__ = (
        db.UniqueConstraint("promotion_id", "article_id", name="uq_promotion_free_goods"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    promotion_id = db.Column(db.Integer, db.ForeignKey("promotions.id"), nullable=False, index=True)
    article_id = db.Column(db.Integer, db.ForeignKey("articles.id"), nullable=False)


class Voucher(db.Model):
    """
    Voucher definition.

    mode=0: one shared code (voucher_code) usable by everyone.
    mode=1: individual single-use codes stored in voucher_codes.
    """
    __tablename__ = "vouchers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    voucher_code = db.Column(db.String(100), nullable=True, index=True)
    mode = db.Column(db.Integer, nullable=False, default=VOUCHER_MODE_SHARED)

    codes = db.relationship("VoucherCode", backref="voucher", lazy=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "voucher_code": self.voucher_code,
            "mode": self.mode,
        }


class VoucherCode(db.Model):
    """Individual single-use code of a mode=1 voucher."""
    __tablename__ = "voucher_codes"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_voucher_codes_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    voucher_id = db.Column(db.Integer, db.ForeignKey("vouchers.id"), nullable=False, index=True)
    code = db.Column(db.String(100), nullable=False)
    cashed = db.Column(db.Boolean, nullable=False, default=False, index=True)
    customer_id = db.Column(db.Integer, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "voucher_id": self.voucher_id,
            "code": self.code,
            "cashed": self.cashed,
            "customer_id": self.customer_id,
        }


class PromotionCustomerCount(db.Model):
    """One row per redemption of a promotion by a customer."""
    __tablename__ = "promotion_customer_counts"
    __table_args__ = (
        db.Index("ix_promotion_customer_counts_promotion_customer", "promotion_id", "customer_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    promotion_id = db.Column(db.Integer, db.ForeignKey("promotions.id"), nullable=False)
    customer_id = db.Column(db.Integer, nullable=False)
    order_id = db.Column(db.Integer, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
