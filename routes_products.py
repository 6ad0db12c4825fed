# routes_products.py
from flask import Blueprint, current_app, g, request

import catalog
from auth import role_required
from errors import NotFoundError
from responses import paginated, success
from validators import pagination_args, validate_product

bp = Blueprint("products", __name__)


def _not_found(product_id):
    return NotFoundError("Product not found.", [f"No product with ID {product_id}."], label="PRODUCTS")

# ---------- Public ----------

@bp.get("")
def list_products():
    page, size, search = pagination_args(
        request.args,
        current_app.config["DEFAULT_PAGE_SIZE"],
        current_app.config["MAX_PAGE_SIZE"],
    )
    result = catalog.list_products(page=page, page_size=size, search=search)
    return paginated(
        [p.to_dict() for p in result.items],
        page=page,
        page_size=size,
        total=result.total,
        pages=result.pages,
        message=f"Found {result.total} products.",
    )


@bp.get("/<int:product_id>")
def product_detail(product_id):
    product = catalog.get_product(product_id)
    if product is None:
        raise _not_found(product_id)
    return success(product.to_dict(), "Product retrieved successfully.")

# ---------- Admin ----------

@bp.post("")
@role_required("admin")
def create_product():
    data = validate_product(request.get_json(silent=True))
    product = catalog.create_product(g.claims.user_id, data)
    return success(product.to_dict(), "Product created successfully.", 201)


@bp.put("/<int:product_id>")
@role_required("admin")
def update_product(product_id):
    changes = validate_product(request.get_json(silent=True), partial=True)
    product = catalog.update_product(product_id, changes)
    if product is None:
        raise _not_found(product_id)
    return success(product.to_dict(), "Product updated successfully.")


@bp.delete("/<int:product_id>")
@role_required("admin")
def delete_product(product_id):
    if catalog.delete_product(product_id) == 0:
        raise _not_found(product_id)
    return success({"id": product_id}, "Product deleted successfully.")
