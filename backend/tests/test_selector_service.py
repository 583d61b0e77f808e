# Overview: Pytest coverage for the bundled rule-based promotion selector.

from promo_basket.models import BasketLine, PromotionCustomerCount, Shop
from promo_basket.models.basket import MODE_PROMOTION
from promo_basket.models.promotions import (
    TYPE_BASKET_FIXED,
    TYPE_BASKET_PERCENTAGE,
    TYPE_FREEGOODS,
    TYPE_FREEGOODSBUNDLE,
)
from promo_basket.services.basket_store import load_basket
from promo_basket.services.selector_service import RulePromotionSelector


def _apply(ctx, voucher_ids=(), customer_id=None):
    return RulePromotionSelector().apply(
        load_basket(ctx.session_id), ctx.shop.customer_group_id, customer_id, ctx.shop.shop_id, list(voucher_ids)
    )


class TestRulePromotionSelector:
    def test_percentage_discount_books_one_line(self, db_session, ctx, add_line, make_promotion):
        add_line(ctx, "SW-1", price_cents=10000)
        promo = make_promotion("Ten percent", TYPE_BASKET_PERCENTAGE, discount_value=1000)

        applied = _apply(ctx)

        assert applied.promotion_ids == [promo.id]
        discount_rows = [row for row in applied.basket.content if row.mode == MODE_PROMOTION]
        assert len(discount_rows) == 1
        assert discount_rows[0].price_cents == -1000
        assert discount_rows[0].promotion_id == promo.id

    def test_booked_promotion_is_not_booked_twice(self, db_session, ctx, add_line, make_promotion):
        add_line(ctx, "SW-1", price_cents=10000)
        make_promotion("Five off", TYPE_BASKET_FIXED, discount_value=500)

        _apply(ctx)
        _apply(ctx)

        assert db_session.query(BasketLine).filter_by(mode=MODE_PROMOTION).count() == 1

    def test_minimum_amount_not_reached(self, db_session, ctx, add_line, make_promotion):
        add_line(ctx, "SW-1", price_cents=2000)
        promo = make_promotion("Big spender", TYPE_BASKET_FIXED, discount_value=500, min_amount_cents=5000)

        applied = _apply(ctx)

        assert applied.promotion_ids == []
        assert applied.promotions_do_not_match == [promo.id]

    def test_usage_limit_per_customer(self, db_session, ctx, add_line, make_promotion):
        add_line(ctx, "SW-1", price_cents=2000)
        promo = make_promotion("Once only", TYPE_BASKET_FIXED, discount_value=500, max_usage_per_customer=1)
        db_session.add(PromotionCustomerCount(promotion_id=promo.id, customer_id=42, order_id=1))
        db_session.commit()

        applied = _apply(ctx, customer_id=42)

        assert applied.promotions_used_too_often == [promo.id]
        assert applied.promotion_ids == []

    def test_voucher_promotion_needs_active_voucher(self, db_session, ctx, add_line, make_voucher, make_promotion):
        add_line(ctx, "SW-1", price_cents=2000)
        voucher = make_voucher(code="SAVE5")
        promo = make_promotion("Five off", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500)

        assert _apply(ctx).promotion_ids == []
        assert _apply(ctx, voucher_ids=[voucher.id]).promotion_ids == [promo.id]

    def test_other_shop_and_group_are_skipped(self, db_session, ctx, add_line, make_promotion):
        other_shop = Shop(name="Other", currency_factor=1.0)
        db_session.add(other_shop)
        db_session.commit()
        add_line(ctx, "SW-1", price_cents=2000)
        make_promotion("Other shop", TYPE_BASKET_FIXED, discount_value=500, shop_id=other_shop.id)
        make_promotion("Other group", TYPE_BASKET_FIXED, discount_value=500, customer_group_id=99)
        everyone = make_promotion("Everyone", TYPE_BASKET_FIXED, discount_value=100)

        assert _apply(ctx).promotion_ids == [everyone.id]

    def test_free_goods_offer_and_badge(self, db_session, ctx, add_line, make_article, make_promotion):
        gift = make_article("FREE-1", price_cents=700)
        add_line(ctx, "SW-1", price_cents=2000)
        promo = make_promotion("Bundle", TYPE_FREEGOODSBUNDLE, free_goods=[gift],
                               free_goods_max_quantity=2, free_goods_badge="Gift")

        applied = _apply(ctx)

        assert applied.promotion_ids == [promo.id]
        assert applied.promotion_types == {promo.id: TYPE_FREEGOODSBUNDLE}
        assert applied.free_goods_article_ids == {promo.id: [gift.id]}
        assert applied.free_goods_bundle_max_quantity == {promo.id: 2}
        assert applied.free_goods_badges == {promo.id: "Gift"}

    def test_picked_free_good_is_given_away(self, db_session, ctx, add_line, make_article, make_promotion):
        gift = make_article("FREE-1", price_cents=700)
        promo = make_promotion("Gift", TYPE_FREEGOODS, free_goods=[gift])
        add_line(ctx, "SW-1", price_cents=2000)
        add_line(ctx, "FREE-1", price_cents=700, article_id=gift.id, free_good_promotion_ids=[promo.id])

        applied = _apply(ctx)

        assert applied.basket.total_cents == 2000

    def test_empty_basket_matches_nothing(self, db_session, ctx, make_promotion):
        promo = make_promotion("Five off", TYPE_BASKET_FIXED, discount_value=500)

        applied = _apply(ctx)

        assert applied.promotions_do_not_match == [promo.id]
        assert applied.basket.content == []
