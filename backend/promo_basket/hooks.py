# Overview: Named basket lifecycle events and the registry that dispatches them to subscribers.

"""
Basket lifecycle hooks.

The host basket service fires these events; the promotion reconciler is
registered as a subscriber through PROMOTION_SUBSCRIPTIONS, which maps each
event name to the handler method it is delivered to.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Protocol


BASKET_READ_BEFORE = "basket.read.before"
BASKET_READ_AFTER = "basket.read.after"
VOUCHER_SUBMIT_BEFORE = "voucher.submit.before"
VOUCHER_SUBMIT_AFTER = "voucher.submit.after"
ORDER_CREATED = "order.created"

PROMOTION_SUBSCRIPTIONS: dict[str, str] = {
    BASKET_READ_BEFORE: "before_basket_read",
    BASKET_READ_AFTER: "after_basket_read",
    VOUCHER_SUBMIT_BEFORE: "on_voucher_submit",
    VOUCHER_SUBMIT_AFTER: "after_voucher_submit",
    ORDER_CREATED: "on_order_created",
}


class BasketHooks(Protocol):
    def before_basket_read(self, ctx) -> None: ...

    def after_basket_read(self, ctx, basket): ...

    def on_voucher_submit(self, ctx, code: str): ...

    def after_voucher_submit(self, ctx): ...

    def on_order_created(self, ctx, line_items, order_id: int): ...


class HookRegistry:
    def __init__(self):
        self._handlers: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, event: str, handler: Callable) -> None:
        self._handlers[event].append(handler)

    def register_subscriber(self, subscriber: BasketHooks, subscriptions: dict[str, str] | None = None) -> None:
        for event, method_name in (subscriptions or PROMOTION_SUBSCRIPTIONS).items():
            self.subscribe(event, getattr(subscriber, method_name))

    def handlers(self, event: str) -> list[Callable]:
        return list(self._handlers.get(event, []))

    def notify(self, event: str, *args, **kwargs) -> list[Any]:
        """Call every handler; returns their results in registration order."""
        return [handler(*args, **kwargs) for handler in self.handlers(event)]

    def filter(self, event: str, ctx, value: Any) -> Any:
        """Pass value through each handler; a handler returning None keeps the value."""
        for handler in self.handlers(event):
            result = handler(ctx, value)
            if result is not None:
                value = result
        return value
