"""
Product routes.

Handles:
- POST /products                 - create (form on the home page)
- GET  /products/<id>            - detail with order form
- GET/POST /products/<id>/edit   - edit own product
- POST /products/<id>/delete     - delete own product

Validation errors are shown before anything is sent to the backend.
"""

from flask import (
    Blueprint,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from core.exceptions import AuthorizationFailure, StorefrontError
from .helpers import redirect_back, service


products_bp = Blueprint("products", __name__, url_prefix="/products")


@products_bp.route("", methods=["POST"])
def create():
    """Create a product from the home page form."""
    try:
        product = service("PRODUCT_SERVICE").create_product(request.form)
    except AuthorizationFailure:
        raise
    except StorefrontError as e:
        flash(e.message, "error")
        return redirect_back("main.index")

    flash(f"Product '{product.title}' created.", "success")
    return redirect(url_for("main.index"))


@products_bp.route("/<int:product_id>", methods=["GET"])
def detail(product_id: int):
    product = service("PRODUCT_SERVICE").get_product(product_id)
    return render_template("product_detail.html", product=product)


@products_bp.route("/<int:product_id>/edit", methods=["GET", "POST"])
def edit(product_id: int):
    """
    GET: Display the edit form, pre-filled
    POST: Validate and save
    """
    product_service = service("PRODUCT_SERVICE")

    if request.method == "GET":
        product = product_service.get_product(product_id)
        form = {
            "title": product.title,
            "description": product.description,
            "price": str(product.price),
            "stock": str(product.stock),
            "category": product.category,
            "images": ", ".join(product.images),
            "status": product.status,
        }
        return render_template("product_form.html", product_id=product_id, form=form)

    try:
        product_service.update_product(product_id, request.form)
    except AuthorizationFailure:
        raise
    except StorefrontError as e:
        flash(e.message, "error")
        return render_template("product_form.html", product_id=product_id, form=request.form), 400

    flash("Product updated.", "success")
    return redirect(url_for("main.profile"))


@products_bp.route("/<int:product_id>/delete", methods=["POST"])
def delete(product_id: int):
    try:
        service("PRODUCT_SERVICE").delete_product(product_id)
    except AuthorizationFailure:
        raise
    except StorefrontError as e:
        flash(e.message, "error")
        return redirect_back("main.profile")

    flash("Product deleted.", "success")
    return redirect(url_for("main.profile"))
