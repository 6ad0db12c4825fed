# validators.py
import re
from decimal import Decimal, InvalidOperation

from errors import ValidationError
from models import MAX_INT, MAX_PRICE

USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# min 8 chars, one lower, one upper, one digit, one of !@#$%^&*
STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*]).{8,}$")

PRODUCT_FIELDS = ("name", "description", "price", "stock", "category")


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)

def _require_object(data, message):
    if not isinstance(data, dict):
        raise ValidationError(message, ["Request body must be a JSON object."])


# ---------- Auth ----------

def validate_registration(data):
    _require_object(data, "Validation Error")
    errors = []
    username = data.get("username")
    email = data.get("email")
    password = data.get("password")

    if not isinstance(username, str) or not username:
        errors.append("Username is required.")
    elif not 3 <= len(username) <= 30:
        errors.append("Username must be between 3 and 30 characters long.")
    elif not USERNAME_RE.match(username):
        errors.append("Username must be alphanumeric (letters and numbers only).")

    if not isinstance(email, str) or not email:
        errors.append("Email is required.")
    elif not EMAIL_RE.match(email):
        errors.append("Email must be a valid email address.")

    if not isinstance(password, str) or not password:
        errors.append("Password is required.")
    elif not STRONG_PASSWORD_RE.match(password):
        errors.append(
            "Password must be at least 8 characters long and include one uppercase letter, "
            "one lowercase letter, one number, and one special character."
        )

    if errors:
        raise ValidationError("Validation Error", errors)
    return {"username": username, "email": email.strip().lower(), "password": password}

def validate_login(data):
    _require_object(data, "Validation Error")
    errors = []
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not email.strip():
        errors.append("Email is required.")
    elif not EMAIL_RE.match(email.strip()):
        errors.append("Email must be a valid email address.")
    if not isinstance(password, str) or not password:
        errors.append("Password is required.")
    if errors:
        raise ValidationError("Validation Error", errors)
    return {"email": email.strip().lower(), "password": password}


# ---------- Products ----------

def _price(value, errors):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append("Price must be a number.")
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        errors.append("Price must be a number.")
        return None
    if not price.is_finite():
        errors.append("Price must be a number.")
    elif price <= 0:
        errors.append("Price must be greater than 0.")
    elif price > MAX_PRICE:
        errors.append(f"Price cannot exceed {MAX_PRICE}.")
    elif price.as_tuple().exponent < -2:
        errors.append("Price must have at most 2 decimal places.")
    else:
        return price
    return None

def validate_product(data, partial=False):
    """Check a product body; with ``partial`` every field is optional but at least one is needed.

    Returns only the fields that were supplied, with ``price`` as a Decimal.
    """
    _require_object(data, "Validation failed.")
    if partial and not any(field in data for field in PRODUCT_FIELDS):
        raise ValidationError("Validation failed.", [
            "Request body cannot be empty. At least one field (name, description, price, "
            "stock, or category) must be provided for update."
        ], status_code=400)

    errors = []
    clean = {}
    for field in PRODUCT_FIELDS:
        if field not in data:
            if not partial:
                errors.append(f"{field.capitalize()} is required.")
            continue
        value = data[field]
        if field == "name":
            if not isinstance(value, str):
                errors.append("Name must be a string.")
            elif len(value.strip()) < 3:
                errors.append("Name must be at least 3 characters long.")
            elif len(value) > 100:
                errors.append("Name cannot exceed 100 characters.")
            else:
                clean["name"] = value.strip()
        elif field == "description":
            if not isinstance(value, str) or len(value.strip()) < 10:
                errors.append("Description must be at least 10 characters long.")
            else:
                clean["description"] = value.strip()
        elif field == "price":
            price = _price(value, errors)
            if price is not None:
                clean["price"] = price
        elif field == "stock":
            if not _is_int(value):
                errors.append("Stock must be a whole number.")
            elif value < 0:
                errors.append("Stock cannot be negative.")
            elif value > MAX_INT:
                errors.append(f"Stock cannot exceed {MAX_INT}.")
            else:
                clean["stock"] = value
        elif field == "category":
            if not isinstance(value, str) or not value.strip():
                errors.append("Category must be a non-empty string.")
            else:
                clean["category"] = value.strip()

    if errors:
        raise ValidationError("Validation failed.", errors, status_code=400)
    return clean


# ---------- Orders ----------

def validate_order(data):
    """Accept ``[{productId, quantity}, ...]`` or ``{"items": [...], "description": ...}``."""
    description = None
    items = data
    if isinstance(data, dict):
        items = data.get("items")
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise ValidationError("Order validation failed.", ["description must be a string."])

    if not isinstance(items, list):
        raise ValidationError("Order validation failed.", ["Request body must be an array of products."])
    if not items:
        raise ValidationError("Order validation failed.", ["Order must contain at least one item."])

    errors = []
    clean = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"[{i}] item must be an object.")
            continue
        product_id = item.get("productId")
        quantity = item.get("quantity")
        if product_id is None:
            errors.append(f"[{i}] productId is required.")
        elif not _is_int(product_id):
            errors.append(f"[{i}] productId must be a number.")
        elif product_id <= 0:
            errors.append(f"[{i}] productId must be positive.")
        if quantity is None:
            errors.append(f"[{i}] quantity is required.")
        elif not _is_int(quantity):
            errors.append(f"[{i}] quantity must be an integer.")
        elif quantity < 1:
            errors.append(f"[{i}] quantity must be at least 1.")
        elif quantity > MAX_INT:
            errors.append(f"[{i}] quantity cannot exceed {MAX_INT}.")
        if not errors:
            clean.append({"productId": product_id, "quantity": quantity})

    if errors:
        raise ValidationError("Order validation failed.", errors)
    return clean, description


# ---------- Query args ----------

def pagination_args(args, default_size, max_size):
    errors = []
    page = args.get("page", "1")
    size = args.get("limit", args.get("pageSize", str(default_size)))
    try:
        page = int(page)
        if page < 1:
            errors.append("page must be at least 1.")
        elif page > MAX_INT:
            errors.append(f"page cannot exceed {MAX_INT}.")
    except ValueError:
        errors.append("page must be an integer.")
    try:
        size = int(size)
        if not 1 <= size <= max_size:
            errors.append(f"limit must be between 1 and {max_size}.")
    except ValueError:
        errors.append("limit must be an integer.")
    if errors:
        raise ValidationError("Invalid pagination parameters.", errors, status_code=400)
    search = (args.get("search") or "").strip() or None
    return page, size, search
