"""
Flask route blueprints for the storefront client.

This module contains all route handlers organized by functionality:
- main: Home (catalog + orders) and profile pages
- auth: Login, signup, logout
- products: Product create/detail/edit/delete
- orders: Order create, status change, delete
- api: JSON endpoints (health, session, transitions)

Each blueprint is registered with the Flask app in create_app().
"""

from .main import main_bp
from .auth import auth_bp
from .products import products_bp
from .orders import orders_bp
from .api import api_bp

__all__ = [
    "main_bp",
    "auth_bp",
    "products_bp",
    "orders_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(api_bp)
