"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH"}
)

# Load .env in development (no-op when the file is missing)
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


_DURATION_RE = re.compile(r"^\s*(\d+)\s*([a-zA-Z]*)\s*$")

_DURATION_UNITS: Final[Mapping[str, int]] = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 7 * 86400,
}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Convert a TTL setting such as ``"15m"`` or ``"7d"`` into a timedelta.

    Parameters
    ----------
    value: str | int | timedelta
        Either a ready ``timedelta``, a number of seconds, or a string made of
        an integer and an optional unit suffix (``s``, ``m``, ``h``, ``d``,
        ``w``). A bare number is read as seconds.

    Returns
    -------
    datetime.timedelta
        Positive duration.

    Raises
    ------
    ValueError
        If the string is malformed, the unit is unknown, or the duration is
        not strictly positive.

    Notes
    -----
    The unit is always read from the suffix; ``"2h"`` is 7200 seconds and
    ``"2x"`` is rejected instead of being coerced to some default unit.
    """
    if isinstance(value, timedelta):
        duration = value
    elif isinstance(value, int):
        duration = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        multiplier = _DURATION_UNITS.get(unit.lower())
        if multiplier is None:
            raise ValueError(f"Unknown duration unit {unit!r} in {value!r}")
        duration = timedelta(seconds=int(amount) * multiplier)

    if duration <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return duration


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Not used for credentials.
    JWT_ACCESS_SECRET: str
        HMAC secret signing access credentials only.
    JWT_REFRESH_SECRET: str
        HMAC secret signing refresh credentials only. Must differ from
        ``JWT_ACCESS_SECRET``.
    JWT_ACCESS_EXPIRE: str
        Access credential lifetime as a duration string (``"15m"``).
    JWT_REFRESH_EXPIRE: str
        Refresh credential lifetime as a duration string (``"7d"``).
    JWT_ALGORITHM: str
        The single accepted signing algorithm.
    REDIS_URL: str | None
        Refresh store location. When unset an in-memory store is used.
    REDIS_SOCKET_TIMEOUT: float
        Bound, in seconds, applied to every store call and connect.
    COOKIE_SECURE: bool
        Adds the ``Secure`` attribute to credential cookies.
    VERIFICATION_TOKEN_TTL, PASSWORD_RESET_TOKEN_TTL: str
        Lifetimes of the one-time email tokens.
    SQLALCHEMY_DATABASE_URI: str
        Identity store connection string.
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

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH")

    # Credential lifetimes
    JWT_ACCESS_EXPIRE = os.getenv("JWT_ACCESS_EXPIRE", "15m")
    JWT_REFRESH_EXPIRE = os.getenv("JWT_REFRESH_EXPIRE", "7d")
    JWT_ALGORITHM = "HS256"
    VERIFICATION_TOKEN_TTL = os.getenv("VERIFICATION_TOKEN_TTL", "1h")
    PASSWORD_RESET_TOKEN_TTL = os.getenv("PASSWORD_RESET_TOKEN_TTL", "10m")

    # Refresh store
    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "0.5"))

    # Cookies
    COOKIE_SECURE = env_bool("COOKIE_SECURE", False)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never talks to a real Redis; fixtures inject the refresh store.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    REDIS_URL = None
    JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef0123456789"
    JWT_REFRESH_SECRET = "test-refresh-secret-fedcba9876543210fedcba98"
    LOG_LEVEL = "WARNING"
    CORS_ORIGINS = "http://localhost:3000"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled and forces ``Secure`` credential cookies.
    :func:`validate_config` rejects placeholder or shared JWT secrets.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    COOKIE_SECURE = True


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


def validate_config(config: Mapping[str, object]) -> None:
    """Fail fast on settings that would weaken credential handling.

    Parameters
    ----------
    config: Mapping[str, object]
        Loaded Flask configuration.

    Raises
    ------
    RuntimeError
        When the access and refresh secrets are equal, or when a placeholder
        secret is used outside debug/testing.
    ValueError
        When a TTL setting cannot be parsed.
    """
    access_secret = str(config.get("JWT_ACCESS_SECRET") or "")
    refresh_secret = str(config.get("JWT_REFRESH_SECRET") or "")
    if not access_secret or not refresh_secret:
        raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be set.")
    if access_secret == refresh_secret:
        raise RuntimeError("Access and refresh credentials must use distinct secrets.")

    relaxed = bool(config.get("DEBUG")) or bool(config.get("TESTING"))
    if not relaxed and {access_secret, refresh_secret} & PLACEHOLDER_SECRETS:
        raise RuntimeError("Refusing to start with placeholder JWT secrets.")

    access_ttl = config_duration(config, "JWT_ACCESS_EXPIRE")
    refresh_ttl = config_duration(config, "JWT_REFRESH_EXPIRE")
    if access_ttl >= refresh_ttl:
        raise RuntimeError("JWT_ACCESS_EXPIRE must be shorter than JWT_REFRESH_EXPIRE.")
    config_duration(config, "VERIFICATION_TOKEN_TTL")
    config_duration(config, "PASSWORD_RESET_TOKEN_TTL")


def config_duration(config: Mapping[str, object], key: str) -> timedelta:
    """Read ``config[key]`` through :func:`parse_duration`.

    :raises RuntimeError: If the key is missing.
    """
    raw = config.get(key)
    if raw is None:
        raise RuntimeError(f"{key} is not configured.")
    if isinstance(raw, (str, int, timedelta)):
        return parse_duration(raw)
    return parse_duration(str(raw))
