"""
Environment-aware configuration.
Values come from the process environment (and .env, if present).
Token lifetimes accept "15m", "7d", "12h", "30s" or a bare number of seconds.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """Turn "15m" / "7d" / "3600" into a timedelta."""
    value = str(value).strip().lower()
    if value.isdigit():
        return timedelta(seconds=int(value))
    amount, unit = value[:-1], value[-1:]
    if unit not in _DURATION_UNITS or not amount.isdigit():
        raise ValueError(f"Invalid duration: {value!r}")
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = int(os.getenv("PORT", "3000"))

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///sahwa.db")
    SQL_ECHO = _flag("SQL_ECHO")

    # jwt configurations; the secret is read once here and never mutated.
    # Production has no fallback secret: create_app refuses to start without one.
    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "sahwa-api")
    ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv("JWT_ACCESS_EXPIRY", "15m"))
    REFRESH_TOKEN_EXPIRES = parse_duration(os.getenv("JWT_REFRESH_EXPIRY", "7d"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    JWT_SECRET = "test-secret-0123456789abcdef0123456789"


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/testing).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
