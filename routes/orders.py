"""
Order routes.

Handles:
- POST /orders                 - place an order
- POST /orders/<id>/status     - request a status change
- POST /orders/<id>/delete     - delete an order

After each mutation the browser is sent back to the page it came from,
which re-fetches the order lists.
"""

from flask import (
    Blueprint,
    flash,
    request,
)

from core.exceptions import AuthorizationFailure, StorefrontError
from .helpers import redirect_back, service

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


@orders_bp.route("", methods=["POST"])
def create():
    """Place an order. Quantity < 1 is refused before any request is sent."""
    try:
        service("ORDER_GATEWAY").create_order(
            request.form.get("product_id"),
            request.form.get("quantity", "1"),
            request.form.get("message"),
        )
    except AuthorizationFailure:
        raise
    except StorefrontError as e:
        flash(e.message, "error")
        return redirect_back("main.index")

    flash("Order created successfully!", "success")
    return redirect_back("main.index")


@orders_bp.route("/<int:order_id>/status", methods=["POST"])
def set_status(order_id: int):
    """Relay a status change; the backend decides whether it is allowed."""
    try:
        order = service("ORDER_GATEWAY").set_status(order_id, request.form.get("new_status", ""))
    except AuthorizationFailure:
        raise
    except StorefrontError as e:
        flash(e.message, "error")
        return redirect_back("main.profile")

    flash(f"Order #{order.id} is now {order.status}.", "success")
    return redirect_back("main.profile")


@orders_bp.route("/<int:order_id>/delete", methods=["POST"])
def delete(order_id: int):
    try:
        service("ORDER_GATEWAY").delete_order(order_id)
    except AuthorizationFailure:
        raise
    except StorefrontError as e:
        flash(e.message, "error")
        return redirect_back("main.profile")

    flash(f"Order #{order_id} deleted.", "success")
    return redirect_back("main.profile")
