"""Product catalog: create, read, paginated listing, partial update, delete."""
from flask import current_app
from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError

from errors import PersistenceError
from models import MAX_INT, db, Product

UPDATABLE = ("name", "description", "price", "stock", "category")


def _in_range(product_id):
    return 0 < product_id <= MAX_INT

def _escape_like(term):
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def _commit(label):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[%s] commit failed", label)
        raise PersistenceError("A database error occurred.", [e.__class__.__name__], label=label)


def create_product(owner_id, data):
    product = Product(user_id=owner_id, **{k: data[k] for k in UPDATABLE if k in data})
    db.session.add(product)
    _commit("CREATE_PRODUCT")
    current_app.logger.info("Product %s created by user %s", product.id, owner_id)
    return product

def get_product(product_id):
    if not _in_range(product_id):
        return None
    return db.session.get(Product, product_id)

def list_products(page=1, page_size=10, search=None):
    """Return a Flask-SQLAlchemy ``Pagination`` (1-based ``page``), newest first."""
    query = select(Product).order_by(desc(Product.created_at), desc(Product.id))
    if search:
        query = query.where(Product.name.ilike(f"%{_escape_like(search)}%", escape="\\"))
    return db.paginate(query, page=page, per_page=page_size, error_out=False)

def update_product(product_id, changes):
    """Apply only the keys present in ``changes``; ``None`` if the product is missing."""
    if not _in_range(product_id):
        return None
    product = db.session.get(Product, product_id)
    if product is None:
        return None
    for field in UPDATABLE:
        if field in changes:
            setattr(product, field, changes[field])
    _commit("UPDATE_PRODUCT")
    return product

def delete_product(product_id):
    if not _in_range(product_id):
        return 0
    result = db.session.execute(delete(Product).where(Product.id == product_id))
    _commit("DELETE_PRODUCT")
    return result.rowcount
