# Overview: Removes stale promotion artifacts from a basket before promotions are recomputed.

from __future__ import annotations

from ..extensions import db
from ..models import BasketLine, BasketLineAttribute
from .basket_store import article_rows, delete_lines, session_line_ids


def reset_promotion_attributes(session_id: str) -> int:
    """Zero the accumulated promotion discounts on every attribute row of the basket."""
    updated = (
        db.session.query(BasketLineAttribute)
        .filter(BasketLineAttribute.basket_line_id.in_(session_line_ids(session_id)))
        .update(
            {
                BasketLineAttribute.item_discount_cents: 0,
                BasketLineAttribute.direct_item_discount_cents: 0,
                BasketLineAttribute.direct_promotions: None,
            },
            synchronize_session=False,
        )
    )
    db.session.commit()
    return updated


def reset_promotion_positions(session_id: str) -> int:
    """Delete the lines promotions inserted into the basket."""
    ids = [
        line_id
        for (line_id,) in db.session.query(BasketLine.id)
        .join(BasketLineAttribute, BasketLineAttribute.basket_line_id == BasketLine.id)
        .filter(BasketLine.session_id == session_id, BasketLineAttribute.promotion_id > 0)
        .all()
    ]
    return delete_lines(ids)


def reset_promotions(session_id: str) -> int:
    """Both resets; safe to call when the basket holds no promotion lines."""
    reset_promotion_attributes(session_id)
    return reset_promotion_positions(session_id)


def pinned_free_good_rows(session_id: str) -> list[dict]:
    """
    Ordinary rows when every one of them is a free good, else [].

    A non-empty result means the basket content is pinned to free-goods
    promotions and must not be reset.
    """
    rows = article_rows(session_id)
    for row in rows:
        if not row["free_good_promotion_ids"]:
            return []
    return rows
