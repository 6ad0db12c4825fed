from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from errors import AuthError, ConflictError, PersistenceError, ValidationError
from models import ROLES, db, User

CENT = Decimal("0.01")

def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)

def hash_password(password: str) -> str:
    return generate_password_hash(password)

def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


# ---------- Tokens ----------

@dataclass(frozen=True)
class Claims:
    user_id: int
    username: str
    email: str
    role: str

    def has_role(self, role: str) -> bool:
        return self.role == role


def _serializer():
    return URLSafeTimedSerializer(
        current_app.config["SECRET_KEY"], salt=current_app.config["TOKEN_SALT"]
    )

def issue_token(user) -> str:
    payload = {
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
    }
    return _serializer().dumps(payload)

def decode_token(token: str) -> Claims:
    try:
        payload = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        raise AuthError("Token expired.")
    except BadSignature:
        raise AuthError("Invalid token.")
    try:
        return Claims(
            user_id=int(payload["userId"]),
            username=payload["username"],
            email=payload["email"],
            role=payload["role"],
        )
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token.")


# ---------- Accounts ----------

def _conflict_message(existing, username, email):
    if existing.email == email:
        return "Email address is already registered."
    return "Username is already taken."

def register_user(username: str, email: str, password: str, role: str = "user") -> User:
    if role not in ROLES:
        raise ValidationError("Validation Error", [f"Unknown role '{role}'."], label="REGISTER")
    # Fast path for a clean message; the unique constraints decide races.
    existing = User.query.filter(or_(User.username == username, User.email == email)).first()
    if existing:
        raise ConflictError("Conflict", [_conflict_message(existing, username, email)], label="REGISTER")

    user = User(username=username, email=email, password_hash=hash_password(password), role=role)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = User.query.filter(or_(User.username == username, User.email == email)).first()
        message = _conflict_message(existing, username, email) if existing else "Username or email already exists."
        raise ConflictError("Conflict", [message], label="REGISTER")
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("User registration failed")
        raise PersistenceError("An internal server error occurred during registration.",
                               [str(e.__class__.__name__)], label="REGISTER")
    current_app.logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user

def authenticate(email: str, password: str) -> str:
    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(user.password_hash, password):
        current_app.logger.warning("Failed login attempt for %s", email)
        raise AuthError("Invalid email or password.", label="LOGIN")
    return issue_token(user)
