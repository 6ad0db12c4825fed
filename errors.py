from werkzeug.exceptions import HTTPException

from responses import failure


class ShopError(Exception):
    """Base for errors the API reports to the client as-is."""

    status_code = 500
    label = "GENERAL"

    def __init__(self, message, errors=None, status_code=None, label=None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])
        if status_code is not None:
            self.status_code = status_code
        if label is not None:
            self.label = label


class ValidationError(ShopError):
    status_code = 422
    label = "VALIDATION"


class AuthError(ShopError):
    status_code = 401
    label = "AUTH"


class ForbiddenError(ShopError):
    status_code = 403
    label = "AUTH"


class NotFoundError(ShopError):
    status_code = 404
    label = "NOT_FOUND"


class ConflictError(ShopError):
    status_code = 400
    label = "CONFLICT"


class InsufficientStockError(ShopError):
    status_code = 400
    label = "STOCK"


class PersistenceError(ShopError):
    status_code = 500
    label = "PERSISTENCE"


class UnknownError(ShopError):
    status_code = 500
    label = "UNKNOWN"


def register_error_handlers(app):
    @app.errorhandler(ShopError)
    def shop_error(e):
        log = app.logger.error if e.status_code >= 500 else app.logger.warning
        log("[%s] %s | %s", e.label, e.message, "; ".join(e.errors))
        return failure(e.message, e.errors, e.status_code)

    @app.errorhandler(404)
    def not_found(e):
        return failure("Not Found", ["Api Route Not Found!"], 404)

    @app.errorhandler(429)
    def rate_limited(e):
        app.logger.warning("[RATE_LIMIT] %s", e.description)
        return failure(
            "You have exceeded the number of allowed requests. Please try again later.",
            ["Rate limit exceeded"],
            429,
        )

    @app.errorhandler(HTTPException)
    def http_error(e):
        return failure(e.name, [e.description], e.code)

    @app.errorhandler(Exception)
    def server_error(e):
        app.logger.exception("[ERROR_HANDLER] unhandled error: %s", e)
        unknown = UnknownError("Something went wrong", ["An internal server error occurred."])
        return failure(unknown.message, unknown.errors, unknown.status_code)
