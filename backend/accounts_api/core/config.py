"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[dict[str, str]] = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}

# Loads .env in development (no-op when the file does not exist)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Convert ``"15m"``, ``"10d"``, ``"3600"`` or an int of seconds to a timedelta.

    Parameters
    ----------
    value: str | int | timedelta
        Raw duration. Strings accept an optional ``s``/``m``/``h``/``d`` suffix.

    Returns
    -------
    datetime.timedelta
        Parsed, strictly positive duration.

    Raises
    ------
    ValueError
        If the value cannot be parsed or is not positive.
    """
    if isinstance(value, timedelta):
        result = value
    elif isinstance(value, int):
        result = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        result = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if result <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return result


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development-safe placeholder.
    ACCESS_TOKEN_SECRET / REFRESH_TOKEN_SECRET: str
        Distinct signing secrets for the two token kinds.
    ACCESS_TOKEN_EXPIRY / REFRESH_TOKEN_EXPIRY: str
        Token lifetimes (``"15m"``, ``"10d"``...), see :func:`parse_duration`.
    JWT_ALGORITHM: str
        HMAC algorithm used to sign both token kinds.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    CLOUDINARY_CLOUD_NAME / CLOUDINARY_API_KEY / CLOUDINARY_API_SECRET: str
        Media store credentials. When the cloud name is blank an in-memory
        store is wired instead outside production; production refuses to start.
    MEDIA_STORE_TIMEOUT: float
        HTTP timeout in seconds for media store calls.
    UPLOAD_TMP_DIR: str
        Directory where multipart uploads are staged before being pushed.
    MAX_CONTENT_LENGTH: int
        Upper bound on request bodies (bytes).
    COOKIE_SECURE: bool
        ``Secure`` flag for token cookies.
    COOKIE_SAMESITE: str
        ``SameSite`` attribute for token cookies.
    REDIS_URL: str | None
        Redis instance backing the access-token denylist.
    AUTH_MASK_UNKNOWN_ACCOUNT: bool
        When ``True`` login reports unknown identifiers as invalid credentials.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_ENV = os.getenv(ENV_VAR, "development").strip().lower()

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "CHANGE_ME_ACCESS")
    ACCESS_TOKEN_EXPIRY = os.getenv("ACCESS_TOKEN_EXPIRY", "15m")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "CHANGE_ME_REFRESH")
    REFRESH_TOKEN_EXPIRY = os.getenv("REFRESH_TOKEN_EXPIRY", "10d")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    AUTH_MASK_UNKNOWN_ACCOUNT = env_bool("AUTH_MASK_UNKNOWN_ACCOUNT", False)

    # Cookies
    COOKIE_SECURE = env_bool("COOKIE_SECURE", False)
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Media store
    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
    MEDIA_STORE_TIMEOUT = float(os.getenv("MEDIA_STORE_TIMEOUT", "30"))
    UPLOAD_TMP_DIR = os.getenv("UPLOAD_TMP_DIR", "./public/temp")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))

    # Denylist
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never talks to Cloudinary or Redis.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    CLOUDINARY_CLOUD_NAME = ""
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Token cookies are always ``Secure`` in production.
    """

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    COOKIE_SECURE = True


PLACEHOLDER_SECRETS = frozenset({"", "CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH"})


def validate_production_config(config: Mapping[str, Any]) -> None:
    """Refuse to start a production app on local-only fallbacks.

    Parameters
    ----------
    config: Mapping[str, Any]
        Loaded Flask configuration.

    Raises
    ------
    RuntimeError
        Listing every missing Cloudinary credential, a missing ``REDIS_URL``
        and placeholder or shared signing secrets.
    """
    problems: list[str] = []
    for key in ("SECRET_KEY", "ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET"):
        if (config.get(key) or "") in PLACEHOLDER_SECRETS:
            problems.append(f"{key} is unset or a placeholder")
    if config.get("ACCESS_TOKEN_SECRET") == config.get("REFRESH_TOKEN_SECRET"):
        problems.append("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
    for key in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
        if not config.get(key):
            problems.append(f"{key} is required")
    if not config.get("REDIS_URL"):
        problems.append("REDIS_URL is required")
    if problems:
        raise RuntimeError("Invalid production configuration: " + "; ".join(problems))


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
