# Overview: Pytest coverage for free-goods offers and bundle quantity caps.

from promo_basket.models.promotions import TYPE_FREEGOODS, TYPE_FREEGOODSBUNDLE
from promo_basket.records import AppliedPromotions, Basket
from promo_basket.services.free_goods_service import cap_bundle_quantity, collect_free_goods, get_free_goods


def _applied(**fields):
    return AppliedPromotions(basket=Basket(session_id="session-a"), **fields)


class TestBundleCap:
    def test_cap_follows_stock_only_when_tracked(self):
        free_goods = [
            {"id": 1, "in_stock": 2, "last_stock": True},
            {"id": 2, "in_stock": 10, "last_stock": True},
            {"id": 3, "in_stock": 1, "last_stock": False},
        ]
        capped = cap_bundle_quantity(free_goods, 3)
        assert [fg["max_quantity"] for fg in capped] == [2, 3, 3]

    def test_cap_of_five_with_four_in_stock(self):
        capped = cap_bundle_quantity([{"id": 1, "in_stock": 4, "last_stock": True}], 5)
        assert capped[0]["max_quantity"] == 4


class TestCollectFreeGoods:
    def test_bundle_offers_carry_capped_quantities(self, db_session, make_article):
        scarce = make_article("FREE-1", in_stock=2, last_stock=True)
        plenty = make_article("FREE-2", in_stock=50, last_stock=True)
        applied = _applied(
            promotion_types={7: TYPE_FREEGOODSBUNDLE},
            free_goods_article_ids={7: [scarce.id, plenty.id]},
            free_goods_bundle_max_quantity={7: 3},
            free_goods_badges={7: "3 for free"},
        )

        free_goods, has_quantity_select = collect_free_goods(applied)

        assert has_quantity_select is True
        by_id = {fg["id"]: fg for fg in free_goods}
        assert by_id[scarce.id]["max_quantity"] == 2
        assert by_id[plenty.id]["max_quantity"] == 3
        assert {fg["promotion_id"] for fg in free_goods} == {7}
        assert {fg["badge"] for fg in free_goods} == {"3 for free"}

    def test_plain_free_goods_pass_through(self, db_session, make_article):
        article = make_article("FREE-1", in_stock=0, last_stock=True)
        applied = _applied(
            promotion_types={4: TYPE_FREEGOODS},
            free_goods_article_ids={4: [article.id]},
        )

        free_goods, has_quantity_select = collect_free_goods(applied)

        assert [fg["id"] for fg in free_goods] == [article.id]
        assert free_goods[0]["max_quantity"] == 0
        assert has_quantity_select is False

    def test_unlimited_bundle_is_offered(self, db_session, make_article):
        article = make_article("FREE-1")
        applied = _applied(
            promotion_types={5: TYPE_FREEGOODSBUNDLE},
            free_goods_article_ids={5: [article.id]},
            free_goods_bundle_max_quantity={5: 0},
        )

        free_goods, has_quantity_select = collect_free_goods(applied)

        assert [fg["id"] for fg in free_goods] == [article.id]
        assert has_quantity_select is False

    def test_offers_of_several_promotions_are_merged(self, db_session, make_article):
        first = make_article("FREE-1")
        second = make_article("FREE-2")
        applied = _applied(
            promotion_types={1: TYPE_FREEGOODS, 2: TYPE_FREEGOODSBUNDLE},
            free_goods_article_ids={1: [first.id], 2: [second.id]},
            free_goods_bundle_max_quantity={2: 2},
        )

        free_goods, _ = collect_free_goods(applied)

        assert [(fg["id"], fg["promotion_id"]) for fg in free_goods] == [(first.id, 1), (second.id, 2)]

    def test_unknown_articles_are_skipped(self, db_session):
        assert get_free_goods([999], 1) == []
        assert get_free_goods([], 1) == []
