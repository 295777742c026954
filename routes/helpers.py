"""
Shared route helpers.
"""

from urllib.parse import urlparse

from flask import current_app, redirect, request, url_for


def is_safe_redirect(target: str) -> bool:
    """True for same-host relative or absolute URLs."""
    if not target:
        return False
    host_url = urlparse(request.host_url)
    parsed = urlparse(target)
    if not parsed.netloc:
        return target.startswith("/") and not target.startswith("//")
    return parsed.scheme in ("http", "https") and parsed.netloc == host_url.netloc


def redirect_back(default_endpoint: str, **values):
    """Redirect to the referring page if it is ours, else to ``default_endpoint``."""
    target = request.referrer
    if target and is_safe_redirect(target):
        return redirect(target)
    return redirect(url_for(default_endpoint, **values))


def service(name: str):
    """Fetch a service registered on the app config (e.g. "ORDER_GATEWAY")."""
    return current_app.config[name]
