# auth_server/managers/config.py
import os
from datetime import timedelta
from typing import Optional

from dotenv import find_dotenv, load_dotenv


_ENV_LOADED: Optional[bool] = None


def load_environment(dotenv_path: Optional[str] = None) -> bool:
    """
    Read the .env file into os.environ, once per process.

    Variables already present in the environment are left alone. Nothing is
    validated here: a missing DB_ACCESS simply stays unset.

    Returns:
        bool: True if a .env file was found and loaded (the first call's result
        on every later call).
    """
    global _ENV_LOADED
    if _ENV_LOADED is not None:
        return _ENV_LOADED

    path = dotenv_path or find_dotenv(usecwd=True)
    _ENV_LOADED = bool(path) and load_dotenv(path, override=False)
    return _ENV_LOADED


class Config:
    # Core
    SECRET_KEY = "fallback-secret-key"
    PERMANENT_SESSION_LIFETIME = timedelta(hours=1)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # JSON body limit (100kb)
    MAX_CONTENT_LENGTH = 100 * 1024

    LOG_LEVEL = "INFO"

    # MongoDB
    DB_ACCESS = None
    DB_NAME = "auth_db"
    DB_READY_TIMEOUT_SEC = 2.0
    MONGO_SERVER_SELECTION_TIMEOUT_MS = 5000
    MONGO_SOCKET_TIMEOUT_MS = 10000
    MONGO_MAX_POOL_SIZE = 100

    # environment variable -> cast
    env_keys = {
        "SECRET_KEY": str,
        "LOG_LEVEL": str,
        "DB_ACCESS": str,
        "DB_NAME": str,
        "DB_READY_TIMEOUT_SEC": float,
        "MONGO_SERVER_SELECTION_TIMEOUT_MS": int,
        "MONGO_SOCKET_TIMEOUT_MS": int,
        "MONGO_MAX_POOL_SIZE": int,
    }

    @classmethod
    def init_app(cls, app):
        for key, cast in cls.env_keys.items():
            value = os.getenv(key)
            if value:
                app.config[key] = cast(value)


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True

    @classmethod
    def init_app(cls, app):
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY must be set in production")
        super().init_app(app)


class TestingConfig(Config):
    TESTING = True
    LOG_LEVEL = "DEBUG"
    DB_READY_TIMEOUT_SEC = 0.0


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(env: Optional[str] = None):
    env = env or os.environ.get("FLASK_ENV", "development")
    try:
        return CONFIGS[env]
    except KeyError:
        raise ValueError(f"Unknown environment '{env}', expected one of {sorted(CONFIGS)}")
