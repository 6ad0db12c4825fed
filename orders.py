"""Order placement.

``place_order`` runs as one transaction: the product rows named in the
request are locked ``FOR UPDATE``, stock is checked and the order priced from
the locked rows, then the order, its line items and the stock decrements are
written and committed together. Any failure rolls the whole thing back, so no
partial order or partial decrement is ever visible.

Two orders touching the same product serialize on the row lock; the second
re-reads the stock the first left behind. Orders on disjoint products don't
block each other.
"""
from decimal import Decimal

from flask import current_app
from sqlalchemy import desc, select, update
from sqlalchemy.exc import SQLAlchemyError

from errors import InsufficientStockError, NotFoundError, PersistenceError
from models import MAX_INT, ORDER_STATUSES, db, Order, OrderItem, Product
from services import to_money


def merge_lines(items):
    """Collapse repeated product ids into one line, keeping first-seen order."""
    merged = {}
    for item in items:
        pid = item["productId"]
        merged[pid] = merged.get(pid, 0) + item["quantity"]
    return [{"productId": pid, "quantity": qty} for pid, qty in merged.items()]

def order_total(lines) -> Decimal:
    """Sum ``unit_price * quantity`` over ``(unit_price, quantity)`` pairs, to the cent."""
    total = Decimal("0")
    for unit_price, quantity in lines:
        total += to_money(unit_price) * quantity
    return to_money(total)


def _lock_products(product_ids):
    # Ids past the column range can't exist; leave them out so they read as not found.
    product_ids = [pid for pid in product_ids if 0 < pid <= MAX_INT]
    if not product_ids:
        return {}
    # Lock in id order so overlapping orders acquire locks in the same order.
    stmt = (
        select(Product)
        .where(Product.id.in_(product_ids))
        .order_by(Product.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {p.id: p for p in db.session.execute(stmt).scalars()}

def _check_stock(lines, products):
    for line in lines:
        product = products.get(line["productId"])
        if product is None:
            raise NotFoundError(
                f"Product with ID {line['productId']} not found.", label="PLACE_ORDER"
            )
        available = product.stock or 0
        if available < line["quantity"]:
            raise InsufficientStockError(
                f"Insufficient stock. Only {available} units of {product.name} available.",
                label="PLACE_ORDER",
            )

def place_order(user_id, items, description=None):
    """Place an order for ``items`` (``[{productId, quantity}]``) and return it with its items.

    Raises NotFoundError for an unknown product, InsufficientStockError when a
    quantity exceeds stock and PersistenceError when the datastore fails.
    """
    lines = merge_lines(items)
    try:
        products = _lock_products([line["productId"] for line in lines])
        _check_stock(lines, products)

        # Prices come from the locked rows and are not read again.
        prices = {pid: to_money(p.price) for pid, p in products.items()}
        total = order_total((prices[line["productId"]], line["quantity"]) for line in lines)

        order = Order(user_id=user_id, description=description, total_price=total, status=ORDER_STATUSES[0])
        db.session.add(order)
        db.session.flush()
        order_id = order.id

        for line in lines:
            db.session.execute(
                update(Product)
                .where(Product.id == line["productId"])
                .values(stock=Product.stock - line["quantity"])
                .execution_options(synchronize_session=False)
            )
            db.session.add(OrderItem(
                order_id=order_id,
                product_id=line["productId"],
                quantity=line["quantity"],
                unit_price=prices[line["productId"]],
            ))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[PLACE_ORDER] transaction failed for user %s", user_id)
        raise PersistenceError(
            "An internal server error occurred while placing the order.",
            [e.__class__.__name__], label="PLACE_ORDER",
        )
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Order %s placed by user %s, total %s", order_id, user_id, total)
    return order

def order_history(user_id):
    """Summaries of a user's orders, newest first."""
    stmt = (
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(desc(Order.created_at), desc(Order.id))
    )
    return [order.summary() for order in db.session.execute(stmt).scalars()]
