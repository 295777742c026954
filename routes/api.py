"""
API routes (JSON endpoints).

Handles:
- /health                          - liveness, optionally probing the backend
- /api/session                     - token-free view of the session
- /api/orders/<id>/transitions     - status targets the UI may offer
"""

from flask import (
    Blueprint,
    current_app,
    jsonify,
    request,
)

from core.exceptions import AuthorizationFailure, StorefrontError
from logging_config import get_logger
from .helpers import service


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """
    Health check endpoint.

    ``?deep=1`` also asks the backend for one product to prove it answers.
    """
    api_client = current_app.config.get("API_CLIENT")
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {"api_client": "configured" if api_client else "missing"},
    }
    if not api_client:
        health_status["status"] = "degraded"

    if api_client and request.args.get("deep") == "1":
        try:
            api_client.list_products({"limit": 1})
            health_status["checks"]["backend"] = "ok"
        except StorefrontError as e:
            logger.warning(f"Backend probe failed: {e}")
            health_status["checks"]["backend"] = "unreachable"
            health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


@api_bp.route("/api/session", methods=["GET"])
def session_state():
    """Current session without tokens."""
    return jsonify(service("SESSION_MANAGER").snapshot().to_public_dict())


@api_bp.route("/api/orders/<int:order_id>/transitions", methods=["GET"])
def order_transitions(order_id: int):
    """Fetch an order and list the status targets the UI would offer."""
    if not service("SESSION_MANAGER").is_authenticated:
        raise AuthorizationFailure("Not logged in")

    gateway = service("ORDER_GATEWAY")
    order = gateway.get_order(order_id)
    return jsonify({
        "order_id": order.id,
        "status": order.status,
        "allowed": [s.value for s in gateway.allowed_transitions(order)],
    })
