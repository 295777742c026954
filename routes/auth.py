"""
Authentication routes.

Handles:
- /login  - credential exchange + identity fetch
- /signup - account registration (does not log in)
- /logout - best-effort server logout, always clears locally
"""

from flask import (
    Blueprint,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from core.exceptions import StorefrontError
from logging_config import get_logger
from .helpers import is_safe_redirect, service


# Module logger
logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    """
    GET: Display the login form
    POST: Log in, then go to ``next`` (if it is one of ours) or home
    """
    session_manager = service("SESSION_MANAGER")

    if request.method == "GET":
        if session_manager.is_authenticated:
            return redirect(url_for("main.index"))
        return render_template("login.html", next=request.args.get("next", ""))

    phone = request.form.get("phone", "")
    next_path = request.form.get("next", "")

    try:
        session = session_manager.login(phone, request.form.get("password", ""))
    except StorefrontError as e:
        flash(e.message, "error")
        return render_template("login.html", phone=phone, next=next_path), 400

    flash(f"Welcome back, {session.current_user.full_name}!", "success")
    if is_safe_redirect(next_path):
        return redirect(next_path)
    return redirect(url_for("main.index"))


@auth_bp.route("/signup", methods=["GET", "POST"])
def signup():
    """
    GET: Display the registration form
    POST: Register and send the user to the login page
    """
    if request.method == "GET":
        return render_template("signup.html", form={})

    session_manager = service("SESSION_MANAGER")
    try:
        session_manager.signup(request.form)
    except StorefrontError as e:
        flash(e.message, "error")
        form = {k: v for k, v in request.form.items() if k != "password"}
        return render_template("signup.html", form=form), 400

    flash("Account created. Please log in.", "success")
    return redirect(url_for("auth.login"))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Log out and return to the catalog."""
    service("SESSION_MANAGER").logout()
    flash("You have been logged out.", "success")
    return redirect(url_for("main.index"))
