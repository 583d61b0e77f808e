# Overview: Free-goods article lookup and the merge of free-goods offers across applied promotions.

from __future__ import annotations

from ..extensions import db
from ..models import Article
from ..models.promotions import TYPE_FREEGOODS, TYPE_FREEGOODSBUNDLE
from ..records import AppliedPromotions


def get_free_goods(article_ids: list[int], promotion_id: int) -> list[dict]:
    """
    Article rows offered as free goods by a promotion, stock data included.

    Unknown or inactive articles are left out.
    """
    if not article_ids:
        return []
    articles = (
        db.session.query(Article)
        .filter(Article.id.in_(article_ids), Article.is_active.is_(True))
        .order_by(Article.id.asc())
        .all()
    )
    rows = []
    for article in articles:
        row = article.to_dict()
        row["promotion_id"] = promotion_id
        rows.append(row)
    return rows


def cap_bundle_quantity(free_goods: list[dict], max_quantity: int) -> list[dict]:
    """
    Offerable quantity per article of a bundle.

    The configured maximum, lowered to the stock on hand for articles whose
    stock is tracked (last_stock).
    """
    capped = []
    for free_good in free_goods:
        limit = max_quantity
        if free_good.get("last_stock") and free_good.get("in_stock", 0) < limit:
            limit = free_good["in_stock"]
        capped.append(dict(free_good, max_quantity=limit))
    return capped


def merge_free_goods(applied: AppliedPromotions, promotion_id: int, free_goods: list[dict], articles: list[dict]) -> list[dict]:
    promo_type = applied.promotion_types.get(promotion_id)
    max_quantity = applied.free_goods_bundle_max_quantity.get(promotion_id, 0)

    if promo_type == TYPE_FREEGOODSBUNDLE:
        if max_quantity:
            return free_goods + cap_bundle_quantity(articles, max_quantity)
        return free_goods + articles

    if promo_type == TYPE_FREEGOODS:
        return free_goods + articles

    return free_goods


def collect_free_goods(applied: AppliedPromotions) -> tuple[list[dict], bool]:
    """
    Free goods the shopper may pick, over all applied promotions.

    Returns (free_goods, has_quantity_select); the flag is set when any
    promotion limits the selectable quantity.
    """
    free_goods: list[dict] = []
    has_quantity_select = False

    for promotion_id, article_ids in applied.free_goods_article_ids.items():
        articles = get_free_goods(article_ids, promotion_id)
        max_quantity = applied.free_goods_bundle_max_quantity.get(promotion_id, 0)
        for article in articles:
            article["max_quantity"] = max_quantity
            article["badge"] = applied.free_goods_badges.get(promotion_id)
            if max_quantity:
                has_quantity_select = True

        free_goods = merge_free_goods(applied, promotion_id, free_goods, articles)

    return free_goods, has_quantity_select
