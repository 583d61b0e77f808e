# Overview: Recursion guard and dirtiness check in front of the basket reconciler.

from __future__ import annotations

from contextlib import contextmanager

from .basket_hash_service import basket_hash


LAST_BASKET_HASH = "lastBasketHash"


class RefreshGate:
    """
    Lets a basket refresh through only when it is needed.

    A refresh is skipped while another refresh of the same request holds the
    gate (the reconciler rewrites the very basket whose read triggered it),
    and when the basket fingerprint equals the one memoized after the last
    successful refresh.
    """

    def __init__(self, ctx):
        self.ctx = ctx

    def should_refresh(self) -> bool:
        if self.ctx.reentrant:
            return False
        last_hash = self.ctx.session.get(LAST_BASKET_HASH)
        return not last_hash or last_hash != basket_hash(self.ctx)

    @contextmanager
    def hold(self):
        self.ctx.reentrant = True
        try:
            yield self
        finally:
            self.ctx.reentrant = False

    def remember(self) -> str:
        digest = basket_hash(self.ctx)
        self.ctx.session.set(LAST_BASKET_HASH, digest)
        return digest

    def forget(self) -> None:
        self.ctx.session.unset(LAST_BASKET_HASH)
