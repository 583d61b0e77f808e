from __future__ import annotations

from ..extensions import db


# Basket line discriminator ("modus")
MODE_ARTICLE = 0
MODE_VOUCHER = 2
MODE_SURCHARGE = 3
MODE_PROMOTION = 4


class BasketLine(db.Model):
    """
    One row of a shopper's basket.

    Ordinary article rows carry the article reference; synthetic rows
    (surcharges, voucher and promotion discounts) use article_id=0 and are
    told apart by mode. Promotion-inserted rows are linked 1:1 to a
    BasketLineAttribute carrying the promotion id.
    """
    __tablename__ = "basket_lines"
    __table_args__ = (
        db.Index("ix_basket_lines_session_mode", "session_id", "mode"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(128), nullable=False, index=True)
    user_id = db.Column(db.Integer, nullable=False, default=0)

    article_id = db.Column(db.Integer, nullable=False, default=0)
    article_name = db.Column(db.String(255), nullable=False)
    order_number = db.Column(db.String(64), nullable=False)

    quantity = db.Column(db.Integer, nullable=False, default=1)
    price_cents = db.Column(db.Integer, nullable=False, default=0)  # gross unit price
    net_price_cents = db.Column(db.Integer, nullable=False, default=0)
    tax_rate_bps = db.Column(db.Integer, nullable=False, default=0)

    mode = db.Column(db.Integer, nullable=False, default=MODE_ARTICLE)
    currency_factor = db.Column(db.Float, nullable=False, default=1.0)
    shipping_free = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    attribute = db.relationship("BasketLineAttribute", uselist=False, back_populates="line")
    free_good_links = db.relationship(
        "BasketFreeGoodLink",
        lazy=True,
        order_by="BasketFreeGoodLink.position.asc()",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "user_id": self.user_id,
            "article_id": self.article_id,
            "article_name": self.article_name,
            "order_number": self.order_number,
            "quantity": self.quantity,
            "price_cents": self.price_cents,
            "net_price_cents": self.net_price_cents,
            "tax_rate_bps": self.tax_rate_bps,
            "mode": self.mode,
            "currency_factor": self.currency_factor,
            "shipping_free": self.shipping_free,
        }


class BasketLineAttribute(db.Model):
    """Promotion bookkeeping for a basket line."""
    __tablename__ = "basket_line_attributes"
    __table_args__ = (
        db.UniqueConstraint("basket_line_id", name="uq_basket_line_attributes_line"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    basket_line_id = db.Column(db.Integer, db.ForeignKey("basket_lines.id"), nullable=False, index=True)

    # Promotion that inserted the line (0/NULL for ordinary rows)
    promotion_id = db.Column(db.Integer, nullable=True, index=True)

    # Accumulated discounts, zeroed on every recompute
    item_discount_cents = db.Column(db.Integer, nullable=False, default=0)
    direct_item_discount_cents = db.Column(db.Integer, nullable=False, default=0)
    direct_promotions = db.Column(db.Text, nullable=True)

    line = db.relationship("BasketLine", back_populates="attribute")

    def to_dict(self) -> dict:
        return {
            "basket_line_id": self.basket_line_id,
            "promotion_id": self.promotion_id,
            "item_discount_cents": self.item_discount_cents,
            "direct_item_discount_cents": self.direct_item_discount_cents,
            "direct_promotions": self.direct_promotions,
        }


class BasketFreeGoodLink(db.Model):
    """
    Promotions granting a basket line as a free good.

    Ordered by position; the first link decides which badge is shown.
    """
    __tablename__ = "basket_free_good_links"
    __table_args__ = (
        db.UniqueConstraint("basket_line_id", "promotion_id", name="uq_free_good_links_line_promotion"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    basket_line_id = db.Column(db.Integer, db.ForeignKey("basket_lines.id"), nullable=False, index=True)
    promotion_id = db.Column(db.Integer, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
