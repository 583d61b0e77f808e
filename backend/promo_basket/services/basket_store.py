# Overview: Storage boundary for basket rows; converts ORM rows into typed records.

"""
Basket storage access shared by the host basket service and the promotion
services. Nothing here fires basket hooks.
"""

from __future__ import annotations

import sqlalchemy as sa

from ..extensions import db
from ..models import BasketLine, BasketLineAttribute, BasketFreeGoodLink
from ..models.basket import MODE_ARTICLE
from ..records import Basket, BasketRow


def session_line_ids(session_id: str):
    """Subquery of the basket line ids of a session."""
    return sa.select(BasketLine.id).where(BasketLine.session_id == session_id)


def free_good_links(line_ids: list[int]) -> dict[int, list[int]]:
    """Ordered promotion ids per basket line id."""
    if not line_ids:
        return {}
    rows = (
        db.session.query(BasketFreeGoodLink.basket_line_id, BasketFreeGoodLink.promotion_id)
        .filter(BasketFreeGoodLink.basket_line_id.in_(line_ids))
        .order_by(BasketFreeGoodLink.basket_line_id.asc(), BasketFreeGoodLink.position.asc())
        .all()
    )
    links: dict[int, list[int]] = {}
    for line_id, promotion_id in rows:
        links.setdefault(line_id, []).append(promotion_id)
    return links


def load_basket(session_id: str) -> Basket:
    lines = (
        db.session.query(BasketLine)
        .filter_by(session_id=session_id)
        .order_by(BasketLine.id.asc())
        .all()
    )
    ids = [line.id for line in lines]
    attributes = {}
    if ids:
        attributes = {
            a.basket_line_id: a
            for a in db.session.query(BasketLineAttribute).filter(BasketLineAttribute.basket_line_id.in_(ids)).all()
        }
    links = free_good_links(ids)
    return Basket(
        session_id=session_id,
        content=[BasketRow.from_models(line, attributes.get(line.id), links.get(line.id)) for line in lines],
    )


def article_rows(session_id: str) -> list[dict]:
    """
    Ordinary article rows with their free-good back-references.

    Plain dicts so the result can be stored in the shopper session as is.
    """
    lines = (
        db.session.query(BasketLine)
        .filter_by(session_id=session_id, mode=MODE_ARTICLE)
        .order_by(BasketLine.id.asc())
        .all()
    )
    links = free_good_links([line.id for line in lines])
    return [
        {
            "basket_line_id": line.id,
            "price_cents": line.price_cents,
            "net_price_cents": line.net_price_cents,
            "tax_rate_bps": line.tax_rate_bps,
            "free_good_promotion_ids": links.get(line.id, []),
        }
        for line in lines
    ]


def delete_lines(line_ids: list[int]) -> int:
    """Delete basket lines together with their attribute rows and free-good links."""
    if not line_ids:
        return 0
    db.session.query(BasketFreeGoodLink).filter(
        BasketFreeGoodLink.basket_line_id.in_(line_ids)
    ).delete(synchronize_session=False)
    db.session.query(BasketLineAttribute).filter(
        BasketLineAttribute.basket_line_id.in_(line_ids)
    ).delete(synchronize_session=False)
    deleted = db.session.query(BasketLine).filter(
        BasketLine.id.in_(line_ids)
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted


def set_free_good_promotions(session_id: str, line_id: int, promotion_ids: list[int]) -> bool:
    """Replace the free-good back-references of one line of this session."""
    line = db.session.query(BasketLine).filter_by(id=line_id, session_id=session_id).first()
    if not line:
        return False
    db.session.query(BasketFreeGoodLink).filter_by(basket_line_id=line_id).delete(synchronize_session=False)
    seen = set()
    position = 0
    for promotion_id in promotion_ids:
        if promotion_id in seen:
            continue
        seen.add(promotion_id)
        db.session.add(BasketFreeGoodLink(basket_line_id=line_id, promotion_id=int(promotion_id), position=position))
        position += 1
    db.session.commit()
    return True
