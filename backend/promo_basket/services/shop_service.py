# Overview: Service-layer lookups for shop context (currency factor).

from __future__ import annotations

from ..extensions import db
from ..models import Shop


def currency_factor(shop_id: int) -> float:
    """Currency factor of the shop; 1.0 when the shop is unknown."""
    shop = db.session.query(Shop).filter_by(id=shop_id).first()
    if not shop or not shop.currency_factor:
        return 1.0
    return float(shop.currency_factor)
