# Overview: Flask API routes for the shopper basket; parses input and returns JSON responses.

"""Basket API routes. The shopper session is identified by the X-Session-Id header."""

from flask import Blueprint, request, jsonify, current_app

from ..context import make_context
from ..services import basket_service
from ..services.basket_service import BasketError


basket_bp = Blueprint("basket", __name__, url_prefix="/api/basket")


def _context_from_request():
    return make_context(
        request.headers.get("X-Session-Id", "").strip(),
        shop_id=request.headers.get("X-Shop-Id", type=int),
        customer_group_id=request.headers.get("X-Customer-Group", type=int),
        customer_id=request.headers.get("X-Customer-Id", type=int),
    )


def _basket_response(ctx, basket, status=200):
    return jsonify({"basket": basket.to_dict(), "promotions": ctx.view.as_dict()}), status


@basket_bp.get("")
def get_basket_route():
    """Read the basket with promotions applied."""
    try:
        ctx = _context_from_request()
        basket = basket_service.get_basket(ctx)
        return _basket_response(ctx, basket)

    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to read basket")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.post("/lines")
def add_line_route():
    try:
        ctx = _context_from_request()
        data = request.get_json() or {}
        article_id = data.get("article_id")
        quantity = data.get("quantity", 1)

        if not article_id:
            return jsonify({"error": "article_id required"}), 400

        line = basket_service.add_article(ctx, int(article_id), int(quantity))
        basket = basket_service.get_basket(ctx)
        return jsonify({"line": line.to_dict(), "basket": basket.to_dict(), "promotions": ctx.view.as_dict()}), 201

    except BasketError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to add basket line")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.delete("/lines/<int:line_id>")
def remove_line_route(line_id: int):
    try:
        ctx = _context_from_request()
        basket_service.remove_line(ctx, line_id)
        basket = basket_service.get_basket(ctx)
        return _basket_response(ctx, basket)

    except BasketError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to remove basket line")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.post("/free-goods")
def add_free_good_route():
    """Pick a free good offered by an applied or pending voucher promotion."""
    try:
        ctx = _context_from_request()
        data = request.get_json() or {}
        article_id = data.get("article_id")
        promotion_id = data.get("promotion_id")

        if not all([article_id, promotion_id]):
            return jsonify({"error": "article_id and promotion_id required"}), 400

        line = basket_service.add_free_good(ctx, int(article_id), int(promotion_id), int(data.get("quantity", 1)))
        basket = basket_service.get_basket(ctx)
        return jsonify({"line": line.to_dict(), "basket": basket.to_dict(), "promotions": ctx.view.as_dict()}), 201

    except BasketError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to add free good")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.post("/surcharges")
def add_surcharge_route():
    try:
        ctx = _context_from_request()
        data = request.get_json() or {}
        order_number = data.get("order_number")
        price_cents = data.get("price_cents")

        if not order_number or price_cents is None:
            return jsonify({"error": "order_number and price_cents required"}), 400

        line = basket_service.add_surcharge(
            ctx,
            order_number,
            data.get("name"),
            int(price_cents),
            int(data.get("tax_rate_bps", 0)),
        )
        return jsonify({"line": line.to_dict()}), 201

    except BasketError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to add surcharge")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.post("/vouchers")
def add_voucher_route():
    """
    Submit a voucher code.

    Rejections are not errors of the request: they come back as
    error_flag/error_messages with status 200.
    """
    try:
        ctx = _context_from_request()
        data = request.get_json() or {}
        code = (data.get("code") or "").strip()

        if not code:
            return jsonify({"error": "code required"}), 400

        result = basket_service.add_voucher(ctx, code)
        basket = basket_service.get_basket(ctx)
        return jsonify({"voucher": result.to_dict(), "basket": basket.to_dict(), "promotions": ctx.view.as_dict()})

    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to add voucher")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.delete("/vouchers/<int:voucher_id>")
def remove_voucher_route(voucher_id: int):
    try:
        ctx = _context_from_request()
        basket_service.remove_voucher(ctx, voucher_id)
        basket = basket_service.get_basket(ctx)
        return _basket_response(ctx, basket)

    except BasketError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to remove voucher")
        return jsonify({"error": "Internal server error"}), 500


@basket_bp.post("/orders")
def create_order_route():
    """Check out the basket."""
    try:
        ctx = _context_from_request()
        order = basket_service.create_order(ctx)
        return jsonify({"order": order.to_dict()}), 201

    except BasketError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500
