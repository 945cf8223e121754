"""
Environment-aware configuration.
Values are read from the environment (and .env if present); the app factory
picks a config class by name or APP_ENV.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///task-tracker.db")

    # RS256 key pair; only the public key is needed to verify access tokens
    JWT_PRIVATE_KEY_PATH = os.getenv("JWT_PRIVATE_KEY_PATH", "keys/private.pem")
    JWT_PUBLIC_KEY_PATH = os.getenv("JWT_PUBLIC_KEY_PATH", "keys/public.pem")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "RS256")
    JWT_ACCESS_EXPIRES = timedelta(minutes=_int_env("JWT_ACCESS_EXPIRES_IN", 15))
    JWT_REFRESH_EXPIRES = timedelta(days=_int_env("JWT_REFRESH_EXPIRES_IN", 7))
    JWT_LEEWAY_SECONDS = _int_env("JWT_LEEWAY_SECONDS", 0)

    # argon2id work factor
    PASSWORD_HASH_TIME_COST = _int_env("PASSWORD_HASH_TIME_COST", 3)
    PASSWORD_HASH_MEMORY_COST = _int_env("PASSWORD_HASH_MEMORY_COST", 65536)
    PASSWORD_HASH_PARALLELISM = _int_env("PASSWORD_HASH_PARALLELISM", 4)

    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refresh_token")
    REFRESH_COOKIE_SECURE = _bool_env("REFRESH_COOKIE_SECURE", True)


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    LOG_LEVEL = "WARNING"
    # cheap hashing keeps the suite fast
    PASSWORD_HASH_TIME_COST = 1
    PASSWORD_HASH_MEMORY_COST = 8
    PASSWORD_HASH_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
