"""
Typed records passed between the basket host and the promotion services.

Storage rows are converted into these records at the storage boundary
(services/basket_store.py) so the reconciliation code never works on raw
column dictionaries.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict

from .models.basket import MODE_ARTICLE


@dataclass
class ShopContext:
    shop_id: int
    customer_group_id: int
    customer_id: int | None = None
    currency_factor: float = 1.0


@dataclass
class BasketRow:
    id: int
    article_id: int
    article_name: str
    order_number: str
    quantity: int
    price_cents: int
    net_price_cents: int
    tax_rate_bps: int
    mode: int
    shipping_free: bool = False
    promotion_id: int | None = None
    free_good_promotion_ids: list[int] = field(default_factory=list)
    free_goods_bundle_badge: str | None = None

    @classmethod
    def from_models(cls, line, attribute=None, promotion_ids=None) -> "BasketRow":
        return cls(
            id=line.id,
            article_id=line.article_id,
            article_name=line.article_name,
            order_number=line.order_number,
            quantity=line.quantity,
            price_cents=line.price_cents,
            net_price_cents=line.net_price_cents,
            tax_rate_bps=line.tax_rate_bps,
            mode=line.mode,
            shipping_free=bool(line.shipping_free),
            promotion_id=attribute.promotion_id if attribute is not None else None,
            free_good_promotion_ids=list(promotion_ids or []),
        )

    @property
    def is_free_good(self) -> bool:
        return bool(self.free_good_promotion_ids)

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.quantity

    def to_dict(self) -> dict:
        data = asdict(self)
        data["line_total_cents"] = self.line_total_cents
        return data


@dataclass
class Basket:
    session_id: str
    content: list[BasketRow] = field(default_factory=list)

    @property
    def article_rows(self) -> list[BasketRow]:
        return [row for row in self.content if row.mode == MODE_ARTICLE]

    @property
    def is_empty(self) -> bool:
        """No ordinary article rows; surcharges and discounts do not count."""
        return not self.article_rows

    @property
    def amount_cents(self) -> int:
        return sum(row.line_total_cents for row in self.article_rows)

    @property
    def total_cents(self) -> int:
        return sum(row.line_total_cents for row in self.content)

    def find(self, row_id: int) -> BasketRow | None:
        for row in self.content:
            if row.id == row_id:
                return row
        return None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "content": [row.to_dict() for row in self.content],
            "amount_cents": self.amount_cents,
            "total_cents": self.total_cents,
        }


@dataclass
class AppliedPromotions:
    """Result of one selector run; built fresh for every basket refresh."""
    basket: Basket
    promotion_ids: list[int] = field(default_factory=list)
    promotion_types: dict[int, str] = field(default_factory=dict)
    free_goods_article_ids: dict[int, list[int]] = field(default_factory=dict)
    free_goods_bundle_max_quantity: dict[int, int] = field(default_factory=dict)
    free_goods_badges: dict[int, str] = field(default_factory=dict)
    promotions_used_too_often: list[int] = field(default_factory=list)
    promotions_do_not_match: list[int] = field(default_factory=list)


@dataclass
class VoucherCandidate:
    promotion_id: int
    name: str
    number: str
    promo_type: str
    shipping_free: bool
    free_goods_max_quantity: int
    article_id: int | None
    voucher_id: int
    code: str
    mode: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "VoucherCandidate":
        return cls(**data)


@dataclass(order=True)
class VoucherBinding:
    """A submitted voucher waiting to be cashed in when the order is placed."""
    promotion_id: int
    voucher_id: int
    code: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "VoucherBinding":
        return cls(
            promotion_id=int(data["promotion_id"]),
            voucher_id=int(data["voucher_id"]),
            code=str(data["code"]),
        )


@dataclass
class OrderLineItem:
    basket_line_id: int
    article_id: int
    quantity: int
    price_cents: int
    customer_id: int
    promotion_id: int | None = None


@dataclass
class VoucherResult:
    error_flag: bool = False
    error_messages: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"error_flag": self.error_flag, "error_messages": list(self.error_messages)}
