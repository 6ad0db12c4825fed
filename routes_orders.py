# routes_orders.py
from flask import Blueprint, g, request

import orders
from auth import role_required, token_required
from responses import success
from validators import validate_order

bp = Blueprint("orders", __name__)


@bp.post("")
@role_required("user")
def place_order():
    items, description = validate_order(request.get_json(silent=True))
    order = orders.place_order(g.claims.user_id, items, description=description)
    return success(order.to_dict(), "Order placed successfully.", 201)


@bp.get("")
@token_required
def order_history():
    history = orders.order_history(g.claims.user_id)
    return success(history, f"Found {len(history)} orders.")
