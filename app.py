"""
Storefront client - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration and logging
2. Builds the shared API client and session manager
3. Creates the product, order and dashboard services
4. Registers route blueprints
5. Sets up the global 401 policy, error handlers and context processors

SESSION MODEL:
    Tokens and the current-user snapshot live in the signed session cookie
    (the browser's persistent storage), under fixed keys. The first request
    of a browser session validates any stored token once (restore_session).

GLOBAL 401 POLICY:
    Any 401 from the backend clears the session inside the API client and
    raises AuthorizationFailure, which is turned into a single redirect to
    the login page here. Requests already on the login page are not
    redirected again.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import (
    Flask,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from logging_config import setup_logging, get_logger
from core.api_client import StorefrontAPIClient
from core.exceptions import AuthorizationFailure, StorefrontError
from core.session_store import FlaskSessionStore
from models.order import allowed_transitions
from services.session_manager import SessionManager
from services.order_gateway import OrderGateway
from services.product_service import ProductService
from services.dashboard_service import DashboardService
from routes import register_blueprints
from routes.helpers import redirect_back


# Module logger (configured after setup_logging)
logger = get_logger(__name__)

LOGIN_ENDPOINT = "auth.login"

# Endpoints that never need the stored token checked
_RESTORE_EXEMPT_ENDPOINTS = frozenset({"static", "api.health"})


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In PyInstaller bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent


def create_app(
    config_object: str = "config.Config",
    api_client: Optional[StorefrontAPIClient] = None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path of the config class
        api_client: Pre-built API client (tests inject one over a fake backend)

    Returns:
        Configured Flask application
    """
    env_file = _get_base_path() / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    app_logger = setup_logging(log_level=log_level, enable_file_logging=enable_file_logging)
    app.logger.handlers = app_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting storefront client in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # SERVICES
    # =========================================================================

    if api_client is None:
        api_client = StorefrontAPIClient(
            app.config["STOREFRONT_API_URL"],
            timeout=app.config.get("API_TIMEOUT_SECONDS", 10.0),
            retry_attempts=app.config.get("API_RETRY_ATTEMPTS", 1),
        )
    logger.info(f"Storefront API at {api_client.base_url}")

    session_manager = SessionManager(api_client, FlaskSessionStore())
    product_service = ProductService(api_client, session_manager)
    order_gateway = OrderGateway(api_client, session_manager)

    app.config["API_CLIENT"] = api_client
    app.config["SESSION_MANAGER"] = session_manager
    app.config["PRODUCT_SERVICE"] = product_service
    app.config["ORDER_GATEWAY"] = order_gateway
    app.config["DASHBOARD_SERVICE"] = DashboardService(product_service, order_gateway)

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # SESSION RESTORE
    # =========================================================================

    @app.before_request
    def restore_session():
        """Validate a stored token once per browser session."""
        if request.endpoint in _RESTORE_EXEMPT_ENDPOINTS:
            return None
        session_manager.restore_session()
        return None

    # =========================================================================
    # CONTEXT PROCESSORS
    # =========================================================================

    @app.context_processor
    def inject_session():
        """Inject the current session (token-free) into all templates."""
        snapshot = session_manager.snapshot()
        return {
            "current_user": snapshot.current_user,
            "is_authenticated": snapshot.is_authenticated,
            "allowed_transitions": allowed_transitions,
        }

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(AuthorizationFailure)
    def handle_unauthorized(e: AuthorizationFailure):
        """
        Second half of the global 401 policy: send the user to login.

        The session was already cleared by the API client hook. Local
        "please login" failures arrive here too and take the same route.
        """
        if request.blueprint == "api":
            return jsonify({"error": e.message}), 401

        if request.endpoint == LOGIN_ENDPOINT:
            # already on the login surface - render instead of redirecting again
            logger.warning("Unauthorized response while on the login page; not redirecting")
            flash(e.message, "error")
            return render_template("login.html"), 401

        flash(e.message, "warning")
        next_path = request.full_path.rstrip("?") if request.method == "GET" else None
        return redirect(url_for(LOGIN_ENDPOINT, next=next_path))

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(e: StorefrontError):
        """Last line for service errors a route did not catch itself."""
        logger.error(f"Unhandled storefront error: {e}")
        if request.blueprint == "api":
            return jsonify({"error": e.message}), 502
        flash(e.message, "error")
        return redirect_back("main.index")

    @app.errorhandler(404)
    def handle_not_found(e):
        flash("Page not found.", "warning")
        return redirect(url_for("main.index"))

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return render_template("error.html", message="An unexpected error occurred. Please try again."), 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
