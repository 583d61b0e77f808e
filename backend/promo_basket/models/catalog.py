from __future__ import annotations

from ..extensions import db


class Shop(db.Model):
    """Sales channel; supplies the currency factor for inserted lines."""
    __tablename__ = "shops"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    currency_factor = db.Column(db.Float, nullable=False, default=1.0)

    def __repr__(self) -> str:
        return f"<Shop {self.id} {self.name}>"


class Article(db.Model):
    """
    Sellable article.

    last_stock=True means stock is tracked: the article cannot be sold
    (or offered as free good) beyond in_stock.
    """
    __tablename__ = "articles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False)

    price_cents = db.Column(db.Integer, nullable=False, default=0)
    net_price_cents = db.Column(db.Integer, nullable=False, default=0)
    tax_rate_bps = db.Column(db.Integer, nullable=False, default=0)

    in_stock = db.Column(db.Integer, nullable=False, default=0)
    last_stock = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "name": self.name,
            "price_cents": self.price_cents,
            "net_price_cents": self.net_price_cents,
            "tax_rate_bps": self.tax_rate_bps,
            "in_stock": self.in_stock,
            "last_stock": self.last_stock,
            "is_active": self.is_active,
        }
