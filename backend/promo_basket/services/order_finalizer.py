# Overview: Cashes in the pending voucher once the order that used it has been created.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import PromotionCustomerCount, VoucherCode
from ..records import OrderLineItem
from . import voucher_service


def finalize_order(ctx, line_items: list[OrderLineItem], order_id: int) -> bool:
    """
    Mark the pending voucher code cashed and count the promotion usage.

    Bindings are sorted and only the first one is considered. The first line
    item carrying that binding's promotion assigns the buyer; later matches
    are ignored. Returns True when a voucher was cashed.
    """
    bindings = sorted(voucher_service.voucher_bindings(ctx))
    if not bindings:
        return False
    binding = bindings[0]

    for item in line_items:
        if item.promotion_id != binding.promotion_id:
            continue

        customer_id = int(item.customer_id or 0)
        db.session.query(VoucherCode).filter_by(code=binding.code).update(
            {VoucherCode.cashed: True, VoucherCode.customer_id: customer_id},
            synchronize_session=False,
        )
        db.session.add(PromotionCustomerCount(
            promotion_id=binding.promotion_id,
            customer_id=customer_id,
            order_id=order_id,
        ))
        db.session.commit()

        voucher_service.clear_bindings(ctx)
        current_app.logger.info(
            "Cashed voucher %s (promotion %s) for order %s",
            binding.code, binding.promotion_id, order_id,
        )
        return True

    return False
