# Overview: Pytest coverage for voucher lookup, pending bindings and the one-voucher-per-order rule.

import pytest

from promo_basket.extensions import db
from promo_basket.models import BasketLine, VoucherCode
from promo_basket.models.basket import MODE_PROMOTION, MODE_VOUCHER
from promo_basket.models.promotions import TYPE_BASKET_FIXED, TYPE_FREEGOODS
from promo_basket.records import VoucherCandidate
from promo_basket.services import voucher_service
from promo_basket.services.voucher_service import (
    PROMOTIONS_FOR_VOUCHER,
    VoucherCodeError,
    find_promotions_for_voucher,
)


def _cache_candidate(ctx, voucher_id, promotion_id=1):
    candidate = VoucherCandidate(
        promotion_id=promotion_id, name="Three off", number=f"prom-{promotion_id}", promo_type=TYPE_BASKET_FIXED,
        shipping_free=False, free_goods_max_quantity=0, article_id=None, voucher_id=voucher_id, code="SAVE3", mode=0,
    )
    ctx.session.set(PROMOTIONS_FOR_VOUCHER, [candidate.to_dict()])
    return candidate


class TestFindPromotionsForVoucher:
    def test_shared_code_yields_one_candidate_per_free_good(self, make_article, make_voucher, make_promotion):
        first = make_article("FREE-1")
        second = make_article("FREE-2")
        voucher = make_voucher(code="WELCOME")
        promo = make_promotion("Welcome gift", TYPE_FREEGOODS, free_goods=[first, second], voucher=voucher,
                               number="WELCOME-GIFT")

        candidates = find_promotions_for_voucher("WELCOME")

        assert sorted(c.article_id for c in candidates) == sorted([first.id, second.id])
        assert {c.promotion_id for c in candidates} == {promo.id}
        assert {c.mode for c in candidates} == {0}
        assert {c.code for c in candidates} == {"WELCOME"}
        assert {c.number for c in candidates} == {"WELCOME-GIFT"}

    def test_individual_code_without_free_goods(self, make_voucher, make_promotion):
        voucher = make_voucher(mode=1, codes=["IND-001", "IND-002"])
        promo = make_promotion("Five off", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500)

        candidates = find_promotions_for_voucher("IND-002")

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.article_id is None
        assert candidate.voucher_id == voucher.id
        assert candidate.mode == 1
        assert candidate.number == f"prom-{promo.id}"

    def test_cashed_individual_code_is_not_found(self, db_session, make_voucher, make_promotion):
        voucher = make_voucher(mode=1, codes=["IND-001"])
        make_promotion("Five off", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500)
        db_session.query(VoucherCode).filter_by(code="IND-001").update({VoucherCode.cashed: True})
        db_session.commit()

        assert find_promotions_for_voucher("IND-001") == []

    def test_shared_code_of_individual_voucher_is_ignored(self, make_voucher, make_promotion):
        voucher = make_voucher(code="NOTSHARED", mode=1)
        make_promotion("Five off", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500)

        assert find_promotions_for_voucher("NOTSHARED") == []

    def test_inactive_promotion_is_not_found(self, make_voucher, make_promotion):
        voucher = make_voucher(code="OLD")
        make_promotion("Retired", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500, is_active=False)

        assert find_promotions_for_voucher("OLD") == []

    def test_blank_and_unknown_codes(self, db_session):
        assert find_promotions_for_voucher("") == []
        assert find_promotions_for_voucher("   ") == []
        assert find_promotions_for_voucher("NOPE") == []


class TestVoucherSubmit:
    def test_submit_caches_candidates(self, ctx, make_voucher, make_promotion):
        voucher = make_voucher(code="SAVE5")
        make_promotion("Five off", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500)

        candidates = voucher_service.on_voucher_submit(ctx, "SAVE5")

        assert len(candidates) == 1
        assert voucher_service.cached_candidates(ctx) == candidates
        assert ctx.binding_before_submit is False

    def test_last_submission_wins(self, ctx, make_voucher, make_promotion):
        voucher = make_voucher(code="SAVE5")
        make_promotion("Five off", TYPE_BASKET_FIXED, voucher=voucher, discount_value=500)

        voucher_service.on_voucher_submit(ctx, "SAVE5")
        voucher_service.on_voucher_submit(ctx, "UNKNOWN")

        assert not ctx.session.exists(PROMOTIONS_FOR_VOUCHER)

    def test_submit_notes_pending_binding(self, ctx):
        voucher_service.register_binding(ctx, VoucherCandidate(
            promotion_id=1, name="Gift", number="prom-1", promo_type=TYPE_FREEGOODS, shipping_free=False,
            free_goods_max_quantity=0, article_id=None, voucher_id=9, code="GIFT", mode=0,
        ))

        voucher_service.on_voucher_submit(ctx, "ANYTHING")

        assert ctx.binding_before_submit is True
        assert ctx.pending_voucher_ids == [9]

    def test_bindings_round_trip_through_session(self, ctx):
        candidate = VoucherCandidate(
            promotion_id=3, name="Gift", number="prom-3", promo_type=TYPE_FREEGOODS, shipping_free=False,
            free_goods_max_quantity=0, article_id=None, voucher_id=11, code="GIFT", mode=0,
        )
        binding = voucher_service.register_binding(ctx, candidate)

        assert voucher_service.voucher_bindings(ctx) == [binding]
        assert voucher_service.active_voucher_ids(ctx) == [11]
        assert voucher_service.remove_binding(ctx, 11) is True
        assert voucher_service.remove_binding(ctx, 11) is False
        assert voucher_service.voucher_bindings(ctx) == []


class TestSingleVoucherPerOrder:
    def test_first_voucher_is_accepted(self, ctx, add_line):
        add_line(ctx, "SW-1")
        add_line(ctx, "VOUCHER", price_cents=-500, mode=MODE_VOUCHER, article_id=0)

        assert voucher_service.after_voucher_submit(ctx) is None

    def test_second_voucher_line_is_removed_and_rejected(self, ctx, add_line):
        add_line(ctx, "SW-1")
        first = add_line(ctx, "VOUCHER-A", price_cents=-500, mode=MODE_VOUCHER, article_id=0)
        add_line(ctx, "VOUCHER-B", price_cents=-300, mode=MODE_VOUCHER, article_id=0)

        result = voucher_service.after_voucher_submit(ctx)

        assert result.error_flag is True
        assert result.error_messages == ["Only one voucher can be processed in order"]
        remaining = [line.id for line in voucher_service.voucher_derived_lines(ctx.session_id)]
        assert remaining == [first.id]

    def test_pending_binding_with_voucher_line_is_rejected(self, ctx, add_line):
        add_line(ctx, "SW-1")
        add_line(ctx, "VOUCHER-A", price_cents=-500, mode=MODE_VOUCHER, article_id=0)
        ctx.binding_before_submit = True

        result = voucher_service.after_voucher_submit(ctx)

        assert result.error_flag is True
        assert db.session.query(BasketLine).filter_by(session_id=ctx.session_id).count() == 2

    def test_automatic_promotion_lines_do_not_count(self, ctx, add_line, make_promotion):
        automatic = make_promotion("Ten percent", "BASKET_PERCENTAGE", discount_value=1000)
        add_line(ctx, "SW-1")
        add_line(ctx, "prom-auto", price_cents=-100, mode=MODE_PROMOTION, promotion_id=automatic.id, article_id=0)
        ctx.binding_before_submit = True

        assert voucher_service.voucher_derived_lines(ctx.session_id) == []
        assert voucher_service.after_voucher_submit(ctx) is None

    def test_other_pending_voucher_without_line_is_rejected(self, ctx):
        _cache_candidate(ctx, voucher_id=8)
        ctx.pending_voucher_ids = [5]
        ctx.binding_before_submit = True

        result = voucher_service.after_voucher_submit(ctx)

        assert voucher_service.voucher_derived_lines(ctx.session_id) == []
        assert result.error_flag is True

    def test_resubmitting_pending_voucher_without_line_is_accepted(self, ctx):
        _cache_candidate(ctx, voucher_id=5)
        ctx.pending_voucher_ids = [5]
        ctx.binding_before_submit = True

        assert voucher_service.after_voucher_submit(ctx) is None


class TestGenerateCodes:
    def test_generates_unique_codes(self, db_session, make_voucher):
        voucher = make_voucher(mode=1)

        codes = voucher_service.generate_codes(voucher.id, 5, prefix="SUMMER-")

        assert len(set(codes)) == 5
        assert all(code.startswith("SUMMER-") for code in codes)
        assert db_session.query(VoucherCode).filter_by(voucher_id=voucher.id, cashed=False).count() == 5

    def test_shared_voucher_is_refused(self, db_session, make_voucher):
        voucher = make_voucher(code="SHARED")

        with pytest.raises(VoucherCodeError, match="shared"):
            voucher_service.generate_codes(voucher.id, 1)
