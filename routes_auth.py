# routes_auth.py
from flask import Blueprint, request

from responses import success
from services import authenticate, register_user
from validators import validate_login, validate_registration

bp = Blueprint("auth", __name__)


@bp.post("/register")
def register():
    data = validate_registration(request.get_json(silent=True))
    user = register_user(data["username"], data["email"], data["password"])
    return success(user.to_dict(), "Registration successful.", 201)


@bp.post("/login")
def login():
    data = validate_login(request.get_json(silent=True))
    token = authenticate(data["email"], data["password"])
    return success({"token": token}, "Login successful.")
