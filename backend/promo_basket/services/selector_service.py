# Overview: Promotion selection; the adapter that feeds the rule engine and the bundled rule-based selector.

from __future__ import annotations

from typing import Protocol

import sqlalchemy as sa

from ..extensions import db
from ..models import BasketLine, BasketLineAttribute, Promotion, PromotionCustomerCount
from ..models.basket import MODE_PROMOTION
from ..models.promotions import (
    TYPE_FREEGOODS,
    TYPE_FREEGOODSBUNDLE,
    TYPE_BASKET_PERCENTAGE,
    TYPE_BASKET_FIXED,
)
from ..records import AppliedPromotions, Basket
from .basket_store import load_basket, session_line_ids
from .shop_service import currency_factor
from . import voucher_service


class PromotionSelector(Protocol):
    def apply(
        self,
        basket: Basket,
        customer_group_id: int,
        customer_id: int | None,
        shop_id: int,
        voucher_ids: list[int],
    ) -> AppliedPromotions: ...


class PromotionSelectorAdapter:
    """Collects the selector inputs from the request context; no rules of its own."""

    def __init__(self, selector: PromotionSelector):
        self.selector = selector

    def apply(self, ctx, basket: Basket) -> AppliedPromotions:
        return self.selector.apply(
            basket,
            ctx.shop.customer_group_id,
            ctx.shop.customer_id,
            ctx.shop.shop_id,
            voucher_service.active_voucher_ids(ctx),
        )


def _discount_cents(promo: Promotion, amount_cents: int) -> int:
    if promo.promo_type == TYPE_BASKET_PERCENTAGE:
        return amount_cents * promo.discount_value // 10000
    if promo.promo_type == TYPE_BASKET_FIXED:
        return min(promo.discount_value, amount_cents)
    return 0


def _net_cents(gross_cents: int, tax_rate_bps: int) -> int:
    return round(gross_cents * 10000 / (10000 + tax_rate_bps))


class RulePromotionSelector:
    """
    Default selector backed by the promotions table.

    Supports free goods, free-goods bundles and basket discounts. Basket
    discounts, and the value of picked free goods, are booked as one promotion
    line per promotion; lines are only ever added here, stale ones are removed
    by the reset before each run.
    """

    def apply(self, basket, customer_group_id, customer_id, shop_id, voucher_ids):
        result = AppliedPromotions(basket=basket)
        # free goods do not count towards minimum amounts or percentage discounts
        amount_cents = sum(row.line_total_cents for row in basket.article_rows if not row.is_free_good)

        promotions = (
            db.session.query(Promotion)
            .filter(
                Promotion.is_active.is_(True),
                sa.or_(Promotion.shop_id == shop_id, Promotion.shop_id.is_(None)),
                sa.or_(Promotion.customer_group_id == customer_group_id, Promotion.customer_group_id.is_(None)),
            )
            .order_by(Promotion.id.asc())
            .all()
        )

        booked = {
            promotion_id
            for (promotion_id,) in db.session.query(BasketLineAttribute.promotion_id)
            .filter(
                BasketLineAttribute.basket_line_id.in_(session_line_ids(basket.session_id)),
                BasketLineAttribute.promotion_id > 0,
            )
            .all()
        }

        inserted = False
        for promo in promotions:
            if promo.voucher_id and promo.voucher_id not in voucher_ids:
                continue

            if customer_id and promo.max_usage_per_customer:
                used = (
                    db.session.query(PromotionCustomerCount)
                    .filter_by(promotion_id=promo.id, customer_id=customer_id)
                    .count()
                )
                if used >= promo.max_usage_per_customer:
                    result.promotions_used_too_often.append(promo.id)
                    continue

            if basket.is_empty or (promo.min_amount_cents and amount_cents < promo.min_amount_cents):
                result.promotions_do_not_match.append(promo.id)
                continue

            if promo.promo_type in (TYPE_FREEGOODS, TYPE_FREEGOODSBUNDLE):
                result.promotion_ids.append(promo.id)
                result.promotion_types[promo.id] = promo.promo_type
                article_ids = [fg.article_id for fg in promo.free_goods]
                if article_ids:
                    result.free_goods_article_ids[promo.id] = article_ids
                    result.free_goods_bundle_max_quantity[promo.id] = promo.free_goods_max_quantity or 0
                if promo.free_goods_badge:
                    result.free_goods_badges[promo.id] = promo.free_goods_badge

                # picked free goods are given away by one discount line
                picked = [row for row in basket.article_rows if promo.id in row.free_good_promotion_ids]
                if picked and promo.id not in booked:
                    discount = sum(row.line_total_cents for row in picked)
                    self._book_discount(basket, promo, discount, customer_id, shop_id, picked[0].tax_rate_bps)
                    booked.add(promo.id)
                    inserted = True
                continue

            discount = _discount_cents(promo, amount_cents)
            if discount <= 0:
                result.promotions_do_not_match.append(promo.id)
                continue

            result.promotion_ids.append(promo.id)
            result.promotion_types[promo.id] = promo.promo_type
            if promo.id in booked:
                continue
            self._book_discount(basket, promo, discount, customer_id, shop_id)
            booked.add(promo.id)
            inserted = True

        if inserted:
            result.basket = load_basket(basket.session_id)
        return result

    def _book_discount(self, basket: Basket, promo: Promotion, discount_cents: int, customer_id, shop_id, tax_rate_bps=None) -> None:
        if tax_rate_bps is None:
            tax_rate_bps = basket.article_rows[0].tax_rate_bps
        line = BasketLine(
            session_id=basket.session_id,
            user_id=customer_id or 0,
            article_id=0,
            article_name=promo.name,
            order_number=promo.number or f"prom-{promo.id}",
            quantity=1,
            price_cents=-discount_cents,
            net_price_cents=-_net_cents(discount_cents, tax_rate_bps),
            tax_rate_bps=tax_rate_bps,
            mode=MODE_PROMOTION,
            currency_factor=currency_factor(shop_id),
            shipping_free=bool(promo.shipping_free),
        )
        db.session.add(line)
        db.session.flush()
        db.session.add(BasketLineAttribute(basket_line_id=line.id, promotion_id=promo.id))
        db.session.commit()
