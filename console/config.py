"""
Environment-aware configuration.
The database URL itself is read by DBStorage (DATABASE_URL / APP_ENV);
these classes carry the retention and sweep settings used by the CLI.
"""
import os
from dotenv import load_dotenv

load_dotenv()  # Read .env if present


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # Keep a copy of env for visibility
    APP_ENV = os.getenv("APP_ENV", "dev")
    # Retention: rows last used (tokens) or created (sessions) longer ago are swept
    LOGIN_TOKEN_EXPIRE_DAYS = float(os.getenv("LOGIN_TOKEN_EXPIRE_DAYS", "30"))
    EXTERNAL_SESSION_EXPIRE_DAYS = float(os.getenv("EXTERNAL_SESSION_EXPIRE_DAYS", "2"))
    # Smallest age a sweep accepts, guards against wiping live rows by typo
    LOGIN_TOKEN_EXPIRE_MIN_DAYS = 0
    EXTERNAL_SESSION_EXPIRE_MIN_DAYS = 1
    # Batched deletion: rows per transaction and pause between batches
    EXPIRE_BATCH_SIZE = int(os.getenv("EXPIRE_BATCH_SIZE", "1000"))
    EXPIRE_BATCH_SLEEP_MS = int(os.getenv("EXPIRE_BATCH_SLEEP_MS", "100"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    EXPIRE_BATCH_SLEEP_MS = 0


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
