import sqlite3
from datetime import datetime
from decimal import Decimal
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import CheckConstraint, Numeric, event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

ROLES = ("user", "admin")
ORDER_STATUSES = ("pending", "paid", "shipped", "delivered")

# Integer columns are 32-bit; prices are Numeric(10, 2).
MAX_INT = 2**31 - 1
MAX_PRICE = Decimal("99999999.99")


# SQLite has no SELECT ... FOR UPDATE. Taking the write lock when the
# transaction begins gives the same serialization for dev and test databases.
@event.listens_for(Engine, "connect")
def _sqlite_manual_begin(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.isolation_level = None

@event.listens_for(Engine, "begin")
def _sqlite_begin_immediate(conn):
    if conn.dialect.name == "sqlite":
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _iso(value):
    return value.isoformat() if value else None

def _in_clause(column, values):
    return f"{column} IN (" + ", ".join(f"'{v}'" for v in values) + ")"


class User(db.Model):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint(_in_clause("role", ROLES), name="ck_users_role"),)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="user")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {"id": self.id, "username": self.username, "email": self.email}

    def __repr__(self):
        return f"<User {self.username}>"


class Product(db.Model):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(Numeric(10, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    category = db.Column(db.String(100))
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "category": self.category,
            "userId": self.user_id,
            "createdAt": _iso(self.created_at),
        }


class Order(db.Model):
    __tablename__ = "orders"
    __table_args__ = (CheckConstraint(_in_clause("status", ORDER_STATUSES), name="ck_orders_status"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    description = db.Column(db.Text)
    total_price = db.Column(Numeric(10, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=ORDER_STATUSES[0])
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    items = db.relationship("OrderItem", backref="order", lazy="selectin",
                            order_by="OrderItem.product_id")

    def summary(self):
        return {
            "id": self.id,
            "totalPrice": self.total_price,
            "status": self.status,
            "createdAt": _iso(self.created_at),
        }

    def to_dict(self):
        data = self.summary()
        data.update({
            "userId": self.user_id,
            "description": self.description,
            "items": [item.to_dict() for item in self.items],
        })
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"

    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(Numeric(10, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "orderId": self.order_id,
            "productId": self.product_id,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "createdAt": _iso(self.created_at),
        }
