# Overview: Host basket operations; reads and edits the basket and fires the basket lifecycle hooks.

"""
Basket service (host side).

Everything a shopper does to a basket goes through here: reading it, adding
articles, free goods and surcharges, submitting voucher codes and checking
out. Promotions are never computed here; the subscribers registered on the
app's HookRegistry (the BasketReconciler) do that when the hooks fire.
"""

from __future__ import annotations

import sqlalchemy as sa
from flask import current_app

from ..extensions import db
from .. import hooks, messages
from ..models import Article, BasketLine, BasketLineAttribute, BasketFreeGoodLink, Order, Promotion
from ..models.basket import MODE_ARTICLE, MODE_SURCHARGE
from ..records import Basket, OrderLineItem, VoucherResult
from . import voucher_service
from .basket_store import delete_lines, load_basket
from .free_goods_service import cap_bundle_quantity
from .refresh_gate import RefreshGate
from .session_store import SessionStore


class BasketError(Exception):
    """Raised for basket operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _hooks() -> hooks.HookRegistry:
    return current_app.extensions["promotion_hooks"]


def get_basket(ctx) -> Basket:
    """Read the basket; subscribers may rewrite it on the way out."""
    registry = _hooks()
    registry.notify(hooks.BASKET_READ_BEFORE, ctx)
    basket = load_basket(ctx.session_id)
    return registry.filter(hooks.BASKET_READ_AFTER, ctx, basket)


def _get_article(article_id: int) -> Article:
    article = db.session.query(Article).filter_by(id=article_id, is_active=True).first()
    if not article:
        raise BasketError("Article not found", {"article_id": article_id})
    return article


def _insert_line(ctx, article: Article, quantity: int) -> BasketLine:
    line = BasketLine(
        session_id=ctx.session_id,
        user_id=ctx.customer_id or 0,
        article_id=article.id,
        article_name=article.name,
        order_number=article.order_number,
        quantity=quantity,
        price_cents=article.price_cents,
        net_price_cents=article.net_price_cents,
        tax_rate_bps=article.tax_rate_bps,
        mode=MODE_ARTICLE,
        currency_factor=ctx.shop.currency_factor,
    )
    db.session.add(line)
    db.session.flush()
    db.session.add(BasketLineAttribute(basket_line_id=line.id))
    return line


def add_article(ctx, article_id: int, quantity: int = 1) -> BasketLine:
    """Add an article, or raise the quantity of its existing (non free good) row."""
    if quantity <= 0:
        raise BasketError("quantity must be positive", {"quantity": quantity})
    article = _get_article(article_id)

    free_good_line_ids = sa.select(BasketFreeGoodLink.basket_line_id)
    line = (
        db.session.query(BasketLine)
        .filter(
            BasketLine.session_id == ctx.session_id,
            BasketLine.article_id == article.id,
            BasketLine.mode == MODE_ARTICLE,
            BasketLine.id.notin_(free_good_line_ids),
        )
        .first()
    )
    if line:
        line.quantity += quantity
    else:
        line = _insert_line(ctx, article, quantity)
    db.session.commit()
    return line


def offered_free_goods(ctx) -> dict[int, list[int]]:
    """Free-good article ids per promotion the shopper may currently pick."""
    offered: dict[int, list[int]] = {}
    for candidate in voucher_service.cached_candidates(ctx):
        if candidate.article_id is not None:
            offered.setdefault(candidate.promotion_id, []).append(candidate.article_id)

    applied_ids = ctx.session.get("appliedPromotions") or []
    if applied_ids:
        for promo in db.session.query(Promotion).filter(Promotion.id.in_(applied_ids)).all():
            for free_good in promo.free_goods:
                offered.setdefault(promo.id, []).append(free_good.article_id)
    return offered


def add_free_good(ctx, article_id: int, promotion_id: int, quantity: int = 1) -> BasketLine:
    """
    Add an article as free good of a promotion.

    Only articles offered by an applied promotion or by the promotion of a
    pending voucher code are accepted. Bundle promotions cap the quantity,
    lowered to the stock on hand for stock-tracked articles.
    """
    if article_id not in offered_free_goods(ctx).get(promotion_id, []):
        raise BasketError(
            messages.get(messages.BASKET_MESSAGES, "FreeGoodNotAvailable"),
            {"article_id": article_id, "promotion_id": promotion_id},
        )
    article = _get_article(article_id)
    promo = db.session.get(Promotion, promotion_id)
    if promo.free_goods_max_quantity:
        offer = cap_bundle_quantity([article.to_dict()], promo.free_goods_max_quantity)[0]
        quantity = min(quantity, offer["max_quantity"])
    if quantity <= 0:
        raise BasketError("quantity must be positive", {"quantity": quantity})

    line = _insert_line(ctx, article, quantity)
    db.session.add(BasketFreeGoodLink(basket_line_id=line.id, promotion_id=promotion_id, position=0))
    db.session.commit()
    return line


def add_surcharge(ctx, order_number: str, name: str, price_cents: int, tax_rate_bps: int = 0) -> BasketLine:
    """Book a payment surcharge or shipping line (mode 3)."""
    if not order_number:
        raise BasketError("order_number required")
    line = BasketLine(
        session_id=ctx.session_id,
        user_id=ctx.customer_id or 0,
        article_id=0,
        article_name=name or order_number,
        order_number=order_number,
        quantity=1,
        price_cents=price_cents,
        net_price_cents=round(price_cents * 10000 / (10000 + tax_rate_bps)),
        tax_rate_bps=tax_rate_bps,
        mode=MODE_SURCHARGE,
        currency_factor=ctx.shop.currency_factor,
    )
    db.session.add(line)
    db.session.flush()
    db.session.add(BasketLineAttribute(basket_line_id=line.id))
    db.session.commit()
    return line


def remove_line(ctx, line_id: int) -> None:
    line = db.session.query(BasketLine).filter_by(id=line_id, session_id=ctx.session_id).first()
    if not line:
        raise BasketError("Basket line not found", {"line_id": line_id})
    delete_lines([line.id])


def add_voucher(ctx, code: str) -> VoucherResult:
    """
    Submit a voucher code.

    The before hook resolves the code; the after hook may reject the
    submission, in which case the binding added here is taken back again.
    """
    registry = _hooks()
    registry.notify(hooks.VOUCHER_SUBMIT_BEFORE, ctx, code)

    candidates = voucher_service.cached_candidates(ctx)
    if not candidates:
        message = messages.get(messages.BASKET_MESSAGES, "VoucherFailureNotFound")
        return VoucherResult(error_flag=True, error_messages=[message])

    candidate = candidates[0]
    is_new = candidate.voucher_id not in voucher_service.active_voucher_ids(ctx)
    voucher_service.register_binding(ctx, candidate)

    result = next(
        (r for r in registry.notify(hooks.VOUCHER_SUBMIT_AFTER, ctx) if r is not None),
        None,
    )

    # bindings are not part of the basket fingerprint
    RefreshGate(ctx).forget()

    if result is not None and result.error_flag:
        if is_new:
            voucher_service.remove_binding(ctx, candidate.voucher_id)
        ctx.session.unset(voucher_service.PROMOTIONS_FOR_VOUCHER)
        return result

    current_app.logger.info(
        "Voucher %s accepted for session %s (promotion %s)",
        candidate.code, ctx.session_id, candidate.promotion_id,
    )
    return VoucherResult()


def remove_voucher(ctx, voucher_id: int) -> None:
    if not voucher_service.remove_binding(ctx, voucher_id):
        raise BasketError("Voucher not in basket", {"voucher_id": voucher_id})
    ctx.session.unset(voucher_service.PROMOTIONS_FOR_VOUCHER)
    RefreshGate(ctx).forget()


def create_order(ctx) -> Order:
    """
    Place the order for the current basket.

    The order.created subscribers receive the basket rows as order line
    items; the basket and the shopper session are emptied afterwards.
    """
    basket = get_basket(ctx)
    if basket.is_empty:
        raise BasketError("Basket is empty", {"session_id": ctx.session_id})

    order = Order(
        session_id=ctx.session_id,
        customer_id=ctx.customer_id or 0,
        total_cents=basket.total_cents,
    )
    db.session.add(order)
    db.session.commit()

    line_items = [
        OrderLineItem(
            basket_line_id=row.id,
            article_id=row.article_id,
            quantity=row.quantity,
            price_cents=row.price_cents,
            customer_id=ctx.customer_id or 0,
            promotion_id=row.promotion_id,
        )
        for row in basket.content
    ]
    _hooks().notify(hooks.ORDER_CREATED, ctx, line_items, order.id)

    delete_lines([row.id for row in basket.content])
    ctx.session.clear()
    current_app.logger.info("Created order %s for session %s", order.id, ctx.session_id)
    return order


def purge_session(session_id: str) -> int:
    """Drop the basket and all session values of a shopper session."""
    ids = [line_id for (line_id,) in db.session.query(BasketLine.id).filter_by(session_id=session_id).all()]
    deleted = delete_lines(ids)
    SessionStore(session_id).clear()
    return deleted
