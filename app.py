import logging
import time
from logging.handlers import RotatingFileHandler

import click
from flask import Flask, g, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from config import DEV_SECRET, DevConfig
from errors import ShopError, register_error_handlers
from models import db
from routes_auth import bp as auth_bp
from routes_orders import bp as orders_bp
from routes_products import bp as products_bp
from services import register_user
from validators import validate_registration


def configure_logging(app):
    app.logger.setLevel(app.config["LOG_LEVEL"])
    log_file = app.config.get("LOG_FILE")
    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=20 * 1024 * 1024, backupCount=30)
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        app.logger.addHandler(handler)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        app.logger.info("%s %s %s - %.1f ms", request.method, request.path, response.status_code, elapsed)
        return response


def configure_rate_limits(app):
    # default limits, storage and on/off switch come from the RATELIMIT_* config keys
    return Limiter(get_remote_address, app=app)


def register_commands(app):
    @app.cli.command("create-admin")
    @click.option("--username", prompt=True)
    @click.option("--email", prompt=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(username, email, password):
        """Create an account with the admin role."""
        try:
            data = validate_registration({"username": username, "email": email, "password": password})
            user = register_user(data["username"], data["email"], data["password"], role="admin")
        except ShopError as e:
            raise click.ClickException("; ".join(e.errors) or e.message)
        click.echo(f"Admin {user.username} created (id={user.id}).")


def create_app(config_object=DevConfig):
    app = Flask(__name__)
    app.config.from_object(config_object)

    if app.config["SECRET_KEY"] == DEV_SECRET and not (app.debug or app.testing):
        raise RuntimeError("SECRET_KEY must be set outside development.")

    configure_logging(app)
    db.init_app(app)
    register_error_handlers(app)
    configure_rate_limits(app)
    register_commands(app)

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(products_bp, url_prefix="/products")
    app.register_blueprint(orders_bp, url_prefix="/orders")

    @app.get("/")
    def index():
        return {"message": "Application API Working Successfully"}

    with app.app_context():
        db.create_all()

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=8000, debug=True)
