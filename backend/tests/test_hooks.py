# Overview: Unit tests for the basket lifecycle hook registry.

import unittest

from promo_basket import hooks
from promo_basket.hooks import HookRegistry, PROMOTION_SUBSCRIPTIONS


class Subscriber:
    def __init__(self):
        self.seen = []

    def before_basket_read(self, ctx):
        self.seen.append(("before", ctx))

    def after_basket_read(self, ctx, basket):
        self.seen.append(("after", ctx))
        return basket + ["promotion"]

    def on_voucher_submit(self, ctx, code):
        self.seen.append(("submit", code))
        return [code]

    def after_voucher_submit(self, ctx):
        return None

    def on_order_created(self, ctx, line_items, order_id):
        self.seen.append(("order", order_id))
        return True


class HookRegistryTests(unittest.TestCase):
    def setUp(self):
        self.registry = HookRegistry()
        self.subscriber = Subscriber()
        self.registry.register_subscriber(self.subscriber)

    def test_every_event_is_subscribed(self):
        for event in PROMOTION_SUBSCRIPTIONS:
            self.assertEqual(len(self.registry.handlers(event)), 1)

    def test_notify_passes_arguments_and_collects_results(self):
        results = self.registry.notify(hooks.VOUCHER_SUBMIT_BEFORE, "ctx", "SAVE5")
        self.assertEqual(results, [["SAVE5"]])
        self.assertEqual(self.subscriber.seen, [("submit", "SAVE5")])

    def test_filter_chains_return_values(self):
        self.registry.subscribe(hooks.BASKET_READ_AFTER, lambda ctx, basket: basket + ["second"])
        result = self.registry.filter(hooks.BASKET_READ_AFTER, "ctx", ["article"])
        self.assertEqual(result, ["article", "promotion", "second"])

    def test_filter_keeps_value_when_handler_returns_none(self):
        self.registry.subscribe(hooks.BASKET_READ_AFTER, lambda ctx, basket: None)
        result = self.registry.filter(hooks.BASKET_READ_AFTER, "ctx", ["article"])
        self.assertEqual(result, ["article", "promotion"])

    def test_unknown_event_has_no_handlers(self):
        self.assertEqual(self.registry.notify("basket.unknown"), [])

    def test_custom_subscription_map(self):
        registry = HookRegistry()
        registry.register_subscriber(self.subscriber, {hooks.ORDER_CREATED: "on_order_created"})
        self.assertEqual(registry.notify(hooks.ORDER_CREATED, "ctx", [], 5), [True])
        self.assertEqual(registry.handlers(hooks.BASKET_READ_BEFORE), [])


if __name__ == "__main__":
    unittest.main()
