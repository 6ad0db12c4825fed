import os
from dotenv import load_dotenv
load_dotenv()  # no-op when there's no .env

DEV_SECRET = "dev"

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", DEV_SECRET)
    # three slashes = relative to the instance folder
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOKEN_SALT = os.getenv("TOKEN_SALT", "storefront-auth")
    TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", 60 * 60 * 24))  # 1 day
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
    # Flask-Limiter; several limits separate with ";"
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "60 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True

class DevConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

class TestConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///test.db"
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 15}}
    LOG_FILE = None
    RATELIMIT_ENABLED = False

class ProdConfig(BaseConfig):
    DEBUG = False
