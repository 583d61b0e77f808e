# Overview: Basket reconciler; merges promotion selection results back into the shopper's basket.

"""
Basket Reconciler

Subscribed to the basket lifecycle hooks (see hooks.PROMOTION_SUBSCRIPTIONS).
On every basket read it decides whether promotions must be recomputed,
clears stale promotion artifacts, runs the promotion selector and writes the
result back into the basket and the presentation state. Voucher submission
and order creation are delegated to voucher_service and order_finalizer.

The reconciler rewrites the basket it was invoked to read; the RefreshGate
keeps those nested reads from re-triggering the refresh.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import BasketLine, BasketLineAttribute
from ..models.basket import MODE_PROMOTION, MODE_SURCHARGE
from ..records import AppliedPromotions, Basket
from . import voucher_service
from .basket_store import article_rows, delete_lines, load_basket, set_free_good_promotions
from .free_goods_service import collect_free_goods
from .order_finalizer import finalize_order
from .promotion_reset_service import pinned_free_good_rows, reset_promotions
from .refresh_gate import RefreshGate
from .selector_service import PromotionSelectorAdapter


PROMOTION_ARTICLE_DATA = "getPromotionArticleData"
APPLIED_PROMOTIONS = "appliedPromotions"
PROMOTION_PRESENTATION = "promotionPresentation"


def surcharge_order_numbers() -> list[str]:
    config = current_app.config
    return [
        config.get("PAYMENT_SURCHARGE_ABSOLUTE_NUMBER", "PAYMENTSURCHARGEABSOLUTENUMBER"),
        config.get("SHIPPING_DISCOUNT_NUMBER", "SHIPPINGDISCOUNT"),
        config.get("PAYMENT_SURCHARGE_NUMBER", "PAYMENTSURCHARGE"),
        config.get("DISCOUNT_NUMBER", "DISCOUNT"),
    ]


def remove_premium_shipping_costs(session_id: str) -> list[int]:
    """Drop surcharge and shipping/basket discount lines of an emptied basket."""
    ids = [
        line_id
        for (line_id,) in db.session.query(BasketLine.id)
        .filter(
            BasketLine.session_id == session_id,
            BasketLine.mode.in_((MODE_SURCHARGE, MODE_PROMOTION)),
            BasketLine.order_number.in_(surcharge_order_numbers()),
        )
        .all()
    ]
    delete_lines(ids)
    return ids


class BasketReconciler:
    def __init__(self, selector):
        self.adapter = PromotionSelectorAdapter(selector)

    # -- basket read ---------------------------------------------------------

    def before_basket_read(self, ctx) -> None:
        """Remove existing promotions before the basket is read."""
        if not RefreshGate(ctx).should_refresh():
            return
        if not pinned_free_good_rows(ctx.session_id):
            reset_promotions(ctx.session_id)

    def after_basket_read(self, ctx, basket: Basket) -> Basket:
        """Check and add promotions."""
        if ctx.reentrant:
            # nested read inside a refresh; the outer call publishes
            return basket

        gate = RefreshGate(ctx)
        if not gate.should_refresh():
            return self._replay_presentation(ctx, basket)

        with gate.hold():
            basket = self._reconcile(ctx)
            gate.remember()
        return basket

    def _reconcile(self, ctx) -> Basket:
        pinned = pinned_free_good_rows(ctx.session_id)
        if pinned:
            ctx.session.set(PROMOTION_ARTICLE_DATA, pinned)
        else:
            reset_promotions(ctx.session_id)
            ctx.session.unset(PROMOTION_ARTICLE_DATA)

        self._insert_voucher_line(ctx)

        applied = self.adapter.apply(ctx, load_basket(ctx.session_id))

        pinned = ctx.session.get(PROMOTION_ARTICLE_DATA) or []
        if pinned:
            first = pinned[0]
            set_free_good_promotions(ctx.session_id, first["basket_line_id"], first["free_good_promotion_ids"])
            row = applied.basket.find(first["basket_line_id"])
            if row is not None:
                row.free_good_promotion_ids = list(first["free_good_promotion_ids"])

        basket = self._populate_promotion_attributes(ctx, applied)

        if basket.is_empty:
            removed = set(remove_premium_shipping_costs(ctx.session_id))
            basket.content = [row for row in basket.content if row.id not in removed]
            ctx.session.unset(APPLIED_PROMOTIONS)
        else:
            ctx.session.unset(voucher_service.PROMOTIONS_FOR_VOUCHER)
            ctx.session.set(APPLIED_PROMOTIONS, applied.promotion_ids)

        self._offer_voucher_free_goods(ctx, applied)
        free_goods, has_quantity_select = collect_free_goods(applied)

        ctx.view.assign("availablePromotions", ctx.session.get(APPLIED_PROMOTIONS) or [])
        ctx.view.assign("promotionsUsedTooOften", applied.promotions_used_too_often)
        ctx.view.assign("promotionsDoNotMatch", applied.promotions_do_not_match)
        ctx.view.assign("freeGoods", free_goods)
        ctx.view.assign("freeGoodsHasQuantitySelect", has_quantity_select)

        snapshot = ctx.view.as_dict()
        snapshot["freeGoodsBundleBadges"] = {
            str(row.id): row.free_goods_bundle_badge
            for row in basket.content
            if row.free_goods_bundle_badge
        }
        ctx.session.set(PROMOTION_PRESENTATION, snapshot)
        return basket

    def _insert_voucher_line(self, ctx) -> int | None:
        """
        Book the voucher value against a basket made of a single free good.

        The line takes the negative price of that row, so the free good ends
        up at no charge.
        """
        rows = article_rows(ctx.session_id)
        candidates = voucher_service.cached_candidates(ctx)
        if (
            len(rows) != 1
            or voucher_service.voucher_derived_lines(ctx.session_id)
            or not rows[0]["free_good_promotion_ids"]
            or not candidates
        ):
            return None

        candidate = candidates[0]
        row = rows[0]
        line = BasketLine(
            session_id=ctx.session_id,
            user_id=ctx.customer_id or 0,
            article_id=0,
            article_name=candidate.name,
            order_number=candidate.number,
            quantity=1,
            price_cents=-row["price_cents"],
            net_price_cents=-row["net_price_cents"],
            tax_rate_bps=row["tax_rate_bps"],
            mode=MODE_PROMOTION,
            currency_factor=ctx.shop.currency_factor,
            shipping_free=candidate.shipping_free,
        )
        db.session.add(line)
        db.session.flush()
        db.session.add(BasketLineAttribute(basket_line_id=line.id, promotion_id=candidate.promotion_id))
        db.session.commit()
        return line.id

    def _populate_promotion_attributes(self, ctx, applied: AppliedPromotions) -> Basket:
        basket = applied.basket or Basket(session_id=ctx.session_id)

        ids = [row.id for row in basket.content]
        if not ids:
            ctx.view.assign("promotionVoucherIds", {})
            return basket

        promotion_ids = dict(
            db.session.query(BasketLineAttribute.basket_line_id, BasketLineAttribute.promotion_id)
            .filter(BasketLineAttribute.basket_line_id.in_(ids))
            .all()
        )
        vouchers_by_promotion = {
            binding.promotion_id: binding.voucher_id
            for binding in voucher_service.voucher_bindings(ctx)
        }

        promotion_voucher_ids = {}
        for row in basket.content:
            row.promotion_id = promotion_ids.get(row.id)
            if row.free_good_promotion_ids:
                # unknown promotion ids leave the row without a badge
                row.free_goods_bundle_badge = applied.free_goods_badges.get(row.free_good_promotion_ids[0])

            voucher_id = vouchers_by_promotion.get(row.promotion_id)
            if voucher_id:
                promotion_voucher_ids[str(row.id)] = voucher_id

        ctx.view.assign("promotionVoucherIds", promotion_voucher_ids)
        return basket

    def _offer_voucher_free_goods(self, ctx, applied: AppliedPromotions) -> None:
        """While a submitted code is still pending, offer the free goods it unlocks."""
        candidates = voucher_service.cached_candidates(ctx)
        offered: dict[int, list[int]] = {}
        for candidate in candidates:
            if candidate.article_id is None:
                continue
            article_ids = offered.setdefault(candidate.promotion_id, [])
            if candidate.article_id not in article_ids:
                article_ids.append(candidate.article_id)
            applied.promotion_types[candidate.promotion_id] = candidate.promo_type
            applied.free_goods_bundle_max_quantity[candidate.promotion_id] = candidate.free_goods_max_quantity
        if offered:
            applied.free_goods_article_ids = offered

    def _replay_presentation(self, ctx, basket: Basket) -> Basket:
        """Unchanged basket: publish the state of the last refresh again."""
        snapshot = ctx.session.get(PROMOTION_PRESENTATION) or {}
        badges = snapshot.pop("freeGoodsBundleBadges", {})
        for key, value in snapshot.items():
            ctx.view.assign(key, value)
        for row in basket.content:
            row.free_goods_bundle_badge = badges.get(str(row.id))
        return basket

    # -- vouchers --------------------------------------------------------------

    def on_voucher_submit(self, ctx, code: str):
        return voucher_service.on_voucher_submit(ctx, code)

    def after_voucher_submit(self, ctx):
        return voucher_service.after_voucher_submit(ctx)

    # -- orders ----------------------------------------------------------------

    def on_order_created(self, ctx, line_items, order_id: int) -> bool:
        return finalize_order(ctx, line_items, order_id)
