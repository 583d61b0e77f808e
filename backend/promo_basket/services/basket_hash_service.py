# Overview: Content fingerprint of a shopper basket, used to detect when promotions need recomputing.

from __future__ import annotations

import hashlib
import json

from ..extensions import db
from ..models import BasketLine, BasketLineAttribute
from .basket_store import free_good_links


def basket_snapshot(ctx) -> dict:
    """
    All basket lines of the session joined with their promotion attributes,
    plus the shop context they were priced in (shop switches etc.).
    """
    lines = (
        db.session.query(BasketLine)
        .filter_by(session_id=ctx.session_id)
        .order_by(BasketLine.id.asc())
        .all()
    )
    ids = [line.id for line in lines]
    attributes = {}
    if ids:
        attributes = {
            a.basket_line_id: a.to_dict()
            for a in db.session.query(BasketLineAttribute).filter(BasketLineAttribute.basket_line_id.in_(ids)).all()
        }
    links = free_good_links(ids)

    rows = []
    for line in lines:
        row = line.to_dict()
        row["attribute"] = attributes.get(line.id)
        row["free_good_promotion_ids"] = links.get(line.id, [])
        rows.append(row)

    return {
        "basket": rows,
        "shop": {
            "shop_id": ctx.shop.shop_id,
            "customer_group_id": ctx.shop.customer_group_id,
            "customer_id": ctx.shop.customer_id,
            "currency_factor": ctx.shop.currency_factor,
        },
    }


def basket_hash(ctx) -> str:
    """
    SHA-256 over the canonical JSON form of basket_snapshot.

    Change detection only; equal digests are taken to mean equal baskets.
    """
    payload = json.dumps(basket_snapshot(ctx), sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
