# Overview: Service-layer operations for promotion vouchers; code lookup, pending bindings, single-voucher policy.

"""
Voucher handling for voucher-bound promotions.

A promotion owns at most one voucher. Vouchers are redeemed either by a
shared code (mode 0, reusable) or by an individual single-use code (mode 1)
that is cashed when the order is placed. Only one voucher-bound promotion
may be active in a basket at a time.
"""

from __future__ import annotations

import secrets

import sqlalchemy as sa
from flask import current_app

from ..extensions import db
from .. import messages
from ..models import BasketLine, BasketLineAttribute, Promotion, PromotionFreeGood, Voucher, VoucherCode
from ..models.basket import MODE_VOUCHER, MODE_PROMOTION
from ..models.promotions import VOUCHER_MODE_SHARED, VOUCHER_MODE_INDIVIDUAL
from ..records import VoucherBinding, VoucherCandidate, VoucherResult
from .basket_store import delete_lines


PROMOTION_VOUCHERS = "promotionVouchers"
PROMOTIONS_FOR_VOUCHER = "promotionsForVoucherData"


def find_promotions_for_voucher(code: str) -> list[VoucherCandidate]:
    """
    Promotions (with their free goods) that the code may unlock.

    Looks the code up as a shared code (mode 0) as well as an uncashed
    individual code (mode 1). One candidate per free-good article; promotions
    without free goods yield a single candidate with article_id=None.
    """
    code = (code or "").strip()
    if not code:
        return []

    shared = (
        sa.select(
            Promotion.id.label("promotion_id"),
            Promotion.name.label("name"),
            Promotion.number.label("number"),
            Promotion.promo_type.label("promo_type"),
            Promotion.shipping_free.label("shipping_free"),
            Promotion.free_goods_max_quantity.label("free_goods_max_quantity"),
            PromotionFreeGood.article_id.label("article_id"),
            Voucher.id.label("voucher_id"),
            Voucher.voucher_code.label("code"),
            sa.literal(VOUCHER_MODE_SHARED).label("mode"),
        )
        .select_from(Voucher)
        .join(Promotion, Promotion.voucher_id == Voucher.id)
        .outerjoin(PromotionFreeGood, PromotionFreeGood.promotion_id == Promotion.id)
        .where(
            Voucher.voucher_code == code,
            Voucher.mode == VOUCHER_MODE_SHARED,
            Promotion.is_active.is_(True),
        )
    )
    individual = (
        sa.select(
            Promotion.id.label("promotion_id"),
            Promotion.name.label("name"),
            Promotion.number.label("number"),
            Promotion.promo_type.label("promo_type"),
            Promotion.shipping_free.label("shipping_free"),
            Promotion.free_goods_max_quantity.label("free_goods_max_quantity"),
            PromotionFreeGood.article_id.label("article_id"),
            VoucherCode.voucher_id.label("voucher_id"),
            VoucherCode.code.label("code"),
            sa.literal(VOUCHER_MODE_INDIVIDUAL).label("mode"),
        )
        .select_from(VoucherCode)
        .join(Promotion, Promotion.voucher_id == VoucherCode.voucher_id)
        .outerjoin(PromotionFreeGood, PromotionFreeGood.promotion_id == Promotion.id)
        .where(
            VoucherCode.code == code,
            VoucherCode.cashed.is_(False),
            Promotion.is_active.is_(True),
        )
    )

    rows = db.session.execute(sa.union_all(shared, individual)).mappings().all()

    candidates = []
    for row in rows:
        candidates.append(VoucherCandidate(
            promotion_id=int(row["promotion_id"]),
            name=row["name"],
            number=row["number"] or f"prom-{row['promotion_id']}",
            promo_type=row["promo_type"],
            shipping_free=bool(row["shipping_free"]),
            free_goods_max_quantity=int(row["free_goods_max_quantity"] or 0),
            article_id=int(row["article_id"]) if row["article_id"] is not None else None,
            voucher_id=int(row["voucher_id"]),
            code=row["code"],
            mode=int(row["mode"]),
        ))
    return candidates


def cached_candidates(ctx) -> list[VoucherCandidate]:
    """Candidates of the most recent code submission."""
    return [VoucherCandidate.from_dict(c) for c in ctx.session.get(PROMOTIONS_FOR_VOUCHER) or []]


def voucher_bindings(ctx) -> list[VoucherBinding]:
    stored = ctx.session.get(PROMOTION_VOUCHERS) or {}
    return [VoucherBinding.from_dict(data) for data in stored.values()]


def active_voucher_ids(ctx) -> list[int]:
    return [binding.voucher_id for binding in voucher_bindings(ctx)]


def register_binding(ctx, candidate: VoucherCandidate) -> VoucherBinding:
    """Remember a submitted voucher until the order is placed."""
    binding = VoucherBinding(
        promotion_id=candidate.promotion_id,
        voucher_id=candidate.voucher_id,
        code=candidate.code,
    )
    stored = ctx.session.get(PROMOTION_VOUCHERS) or {}
    stored[str(binding.voucher_id)] = binding.to_dict()
    ctx.session.set(PROMOTION_VOUCHERS, stored)
    return binding


def remove_binding(ctx, voucher_id: int) -> bool:
    stored = ctx.session.get(PROMOTION_VOUCHERS) or {}
    if str(voucher_id) not in stored:
        return False
    del stored[str(voucher_id)]
    if stored:
        ctx.session.set(PROMOTION_VOUCHERS, stored)
    else:
        ctx.session.unset(PROMOTION_VOUCHERS)
    return True


def clear_bindings(ctx) -> None:
    ctx.session.unset(PROMOTION_VOUCHERS)


def voucher_derived_lines(session_id: str) -> list[BasketLine]:
    """
    Lines a voucher put into the basket, oldest first.

    Voucher lines (mode 2) always count; promotion lines (mode 4) only when
    their promotion is voucher-bound, so automatic basket promotions never
    block a voucher.
    """
    return (
        db.session.query(BasketLine)
        .outerjoin(BasketLineAttribute, BasketLineAttribute.basket_line_id == BasketLine.id)
        .outerjoin(Promotion, Promotion.id == BasketLineAttribute.promotion_id)
        .filter(
            BasketLine.session_id == session_id,
            sa.or_(
                BasketLine.mode == MODE_VOUCHER,
                sa.and_(BasketLine.mode == MODE_PROMOTION, Promotion.voucher_id.isnot(None)),
            ),
        )
        .order_by(BasketLine.id.asc())
        .all()
    )


def on_voucher_submit(ctx, code: str) -> list[VoucherCandidate]:
    """
    Runs before a code is added to the basket.

    The last submission wins: earlier lookups are dropped before the new
    candidates are cached.
    """
    ctx.session.unset(PROMOTIONS_FOR_VOUCHER)
    ctx.pending_voucher_ids = active_voucher_ids(ctx)
    ctx.binding_before_submit = bool(ctx.pending_voucher_ids)

    candidates = find_promotions_for_voucher(code)
    if candidates:
        ctx.session.set(PROMOTIONS_FOR_VOUCHER, [c.to_dict() for c in candidates])
    return candidates


def after_voucher_submit(ctx) -> VoucherResult | None:
    """
    Runs after a code was added to the basket; enforces one voucher per order.

    Voucher-derived lines beyond the first are removed, and more than one
    such line rejects the submission. So does any other voucher still
    pending from an earlier submission, whether or not its promotion has
    booked a line yet (free good not picked, minimum amount not reached).
    Resubmitting the pending code is rejected once its line exists.
    """
    lines = voucher_derived_lines(ctx.session_id)
    delete_lines([line.id for line in lines[1:]])

    submitted = {candidate.voucher_id for candidate in cached_candidates(ctx)}
    other_pending = [voucher_id for voucher_id in ctx.pending_voucher_ids if voucher_id not in submitted]

    if len(lines) > 1 or other_pending or (ctx.binding_before_submit and len(lines) >= 1):
        message = messages.get(
            messages.BASKET_MESSAGES,
            "VoucherFailureOnlyOnes",
            "Only one voucher can be processed in order",
        )
        current_app.logger.info(
            "Rejected voucher for session %s: %d voucher lines, pending binding %s",
            ctx.session_id, len(lines), ctx.binding_before_submit,
        )
        return VoucherResult(error_flag=True, error_messages=[message])
    return None


class VoucherCodeError(Exception):
    """Raised when codes cannot be generated for a voucher."""


def generate_codes(voucher_id: int, count: int, prefix: str = "") -> list[str]:
    """
    Create individual single-use codes for a mode-1 voucher.

    WHY secrets.token_hex: codes are bearer credentials for a discount and
    must not be guessable from earlier codes.
    """
    voucher = db.session.get(Voucher, voucher_id)
    if not voucher:
        raise VoucherCodeError(f"Voucher {voucher_id} not found")
    if voucher.mode != VOUCHER_MODE_INDIVIDUAL:
        raise VoucherCodeError(f"Voucher {voucher_id} uses a shared code")
    if count <= 0:
        raise VoucherCodeError("count must be positive")

    codes = []
    while len(codes) < count:
        code = f"{prefix}{secrets.token_hex(5).upper()}"
        if code in codes or db.session.query(VoucherCode.id).filter_by(code=code).first():
            continue
        codes.append(code)
        db.session.add(VoucherCode(voucher_id=voucher_id, code=code))
    db.session.commit()
    return codes
