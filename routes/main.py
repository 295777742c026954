"""
Main routes (home, profile).

Both pages fan their fetches out concurrently and render whatever came back;
a failed sub-list shows as empty with a warning.
"""

from flask import (
    Blueprint,
    copy_current_request_context,
    flash,
    render_template,
    request,
)

from core.exceptions import AuthorizationFailure
from services.product_service import FILTER_KEYS
from .helpers import service

main_bp = Blueprint("main", __name__)


@main_bp.route("/", methods=["GET"])
def index():
    """
    Catalog home page.

    Anonymous visitors see products only; logged-in users also see the
    order list and the create-product form.
    """
    session_manager = service("SESSION_MANAGER")

    filters = {k: request.args[k] for k in FILTER_KEYS if request.args.get(k)}
    overview = service("DASHBOARD_SERVICE").load_overview(
        include_orders=session_manager.is_authenticated,
        filters=filters,
        wrap=copy_current_request_context,
    )
    for key, message in overview.errors.items():
        flash(f"Could not load {key}: {message}", "warning")

    return render_template("index.html", overview=overview, filters=filters)


@main_bp.route("/profile", methods=["GET"])
def profile():
    """User card, my products, my orders (buyer) and my sales (seller)."""
    session_manager = service("SESSION_MANAGER")
    if not session_manager.is_authenticated:
        raise AuthorizationFailure("Please log in to view your profile.")

    view = service("DASHBOARD_SERVICE").load_profile(wrap=copy_current_request_context)
    for key, message in view.errors.items():
        flash(f"Could not load {key}: {message}", "warning")

    return render_template("profile.html", view=view, user=session_manager.current_user)
