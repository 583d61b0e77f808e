# backend/promo_basket/routes/system.py
"""
System health endpoint.

Reports database reachability and the basket/promotion subscriber wiring.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..hooks import PROMOTION_SUBSCRIPTIONS
from ..models import BasketLine, Promotion
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        promotion_count = db.session.query(Promotion).count()
        basket_line_count = db.session.query(BasketLine).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "promotions": promotion_count,
                "basket_lines": basket_line_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_hooks_health() -> dict:
    """The reconciler must be subscribed to every basket event."""
    registry = current_app.extensions.get("promotion_hooks")
    if registry is None:
        return {"status": "unhealthy", "error": "Hook registry missing"}

    missing = [event for event in PROMOTION_SUBSCRIPTIONS if not registry.handlers(event)]
    if missing:
        return {"status": "degraded", "warning": f"No subscribers for: {', '.join(missing)}"}
    return {"status": "healthy", "details": {"events": len(PROMOTION_SUBSCRIPTIONS)}}


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded
    - 503: one or more checks unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    hooks_health = check_hooks_health()

    all_checks = [database_health, hooks_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status = "unhealthy"
        http_status = 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    response = {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "hooks": hooks_health,
        }
    }

    return response, http_status
