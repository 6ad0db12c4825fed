# auth.py
from functools import wraps
from flask import g, request

from errors import AuthError, ForbiddenError
from services import decode_token


def _bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise AuthError("Access denied. No token provided.")
    return token.strip()

def token_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.claims = decode_token(_bearer_token())
        return view(*args, **kwargs)
    return wrapper

def role_required(role):
    """Decode the bearer token and require ``role`` in its claims."""
    def decorator(view):
        @wraps(view)
        @token_required
        def wrapper(*args, **kwargs):
            if not g.claims.has_role(role):
                raise ForbiddenError(
                    f"Forbidden. Only users with the '{role}' role can access this resource."
                )
            return view(*args, **kwargs)
        return wrapper
    return decorator
