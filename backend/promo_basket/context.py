from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import current_app

from .records import ShopContext
from .services.session_store import SessionStore
from .services.shop_service import currency_factor


class ViewAssignments:
    """Values handed to the presentation layer; never read back by the services."""

    def __init__(self):
        self._vars: dict[str, Any] = {}

    def assign(self, key: str, value: Any) -> None:
        self._vars[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._vars.get(key, default)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._vars)


@dataclass
class ReconciliationContext:
    """
    Per-request state of one basket-processing call stack.

    reentrant is the recursion guard: set while a refresh rewrites the
    basket so that nested basket reads pass through untouched.
    """
    session_id: str
    shop: ShopContext
    session: SessionStore
    view: ViewAssignments = field(default_factory=ViewAssignments)
    reentrant: bool = False
    binding_before_submit: bool = False
    pending_voucher_ids: list[int] = field(default_factory=list)

    @property
    def customer_id(self) -> int | None:
        return self.shop.customer_id


def make_context(
    session_id: str,
    *,
    shop_id: int | None = None,
    customer_group_id: int | None = None,
    customer_id: int | None = None,
) -> ReconciliationContext:
    if not session_id:
        raise ValueError("session_id required")
    shop_id = shop_id or current_app.config.get("DEFAULT_SHOP_ID", 1)
    customer_group_id = customer_group_id or current_app.config.get("DEFAULT_CUSTOMER_GROUP_ID", 1)
    shop = ShopContext(
        shop_id=int(shop_id),
        customer_group_id=int(customer_group_id),
        customer_id=customer_id,
        currency_factor=currency_factor(int(shop_id)),
    )
    return ReconciliationContext(session_id=session_id, shop=shop, session=SessionStore(session_id))
