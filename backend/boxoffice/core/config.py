"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# bcrypt accepts cost factors in this closed range
MIN_BCRYPT_ROUNDS: Final[int] = 4
MAX_BCRYPT_ROUNDS: Final[int] = 31

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days", "": "seconds"}


# Loads .env during development (no-op when missing)
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised when the application cannot start with the provided settings."""


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
    return as_bool(val)


def as_bool(value: Any) -> bool:
    """Interpret a config value as a flag; strings use the ``env_bool`` spellings."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Parse a compact duration such as ``"30m"`` or ``"7d"``.

    Bare integers are interpreted as seconds.

    :param value: Duration string, seconds, or an existing ``timedelta``.
    :returns: Parsed duration.
    :raises ConfigurationError: If the value cannot be parsed or is not positive.
    """
    if isinstance(value, timedelta):
        parsed = value
    elif isinstance(value, int):
        parsed = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ConfigurationError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        parsed = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if parsed <= timedelta(0):
        raise ConfigurationError(f"Duration must be positive: {value!r}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for cookie signing.
    JWT_ACCESS_SECRET: str | None
        Signing key for access tokens. Required, never defaulted.
    JWT_REFRESH_SECRET: str | None
        Signing key for refresh tokens. Required and distinct from the
        access secret.
    ACCESS_TOKEN_EXPIRES: str
        Access token lifetime as a compact duration (``"30m"``).
    REFRESH_TOKEN_EXPIRES: str
        Refresh token lifetime as a compact duration (``"7d"``).
    BCRYPT_ROUNDS: int
        bcrypt work factor used when hashing passwords.
    PASSWORD_MIN_LENGTH: int
        Minimum accepted password length at registration.
    REFRESH_TOKEN_ROTATION: bool
        When ``True`` each refresh consumes the presented refresh token and
        returns a new one.
    REFRESH_TOKEN_BACKEND: str
        ``"sqlalchemy"`` (default) or ``"redis"``.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
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

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET") or os.getenv("JWT_SECRET")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET")
    ACCESS_TOKEN_EXPIRES = os.getenv("JWT_EXPIRATION", "30m")
    REFRESH_TOKEN_EXPIRES = os.getenv("JWT_REFRESH_EXPIRATION", "7d")
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))

    # Refresh sessions
    REFRESH_TOKEN_ROTATION = env_bool("REFRESH_TOKEN_ROTATION", False)
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sqlalchemy")
    REFRESH_TOKEN_COOKIE = env_bool("REFRESH_TOKEN_COOKIE", False)
    REFRESH_TOKEN_COOKIE_NAME = "refresh_token"
    REFRESH_TOKEN_COOKIE_SECURE = True
    REDIS_URL = os.getenv("REDIS_URL")

    # Rate limiting
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3001")
    CORS_SUPPORTS_CREDENTIALS = env_bool("CORS_CREDENTIALS", False)
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = int(os.getenv("PROXYFIX_HOPS", "1"))

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Secrets still come from the environment (``.env``); nothing is defaulted.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes
    REFRESH_TOKEN_COOKIE_SECURE = False


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses the minimum bcrypt cost so suites stay fast.
    - Disables rate limiting.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_ACCESS_SECRET = "testing-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET = "testing-refresh-secret-fedcba9876543210"
    BCRYPT_ROUNDS = MIN_BCRYPT_ROUNDS
    RATELIMIT_ENABLED = False
    REFRESH_TOKEN_COOKIE_SECURE = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


@dataclass(frozen=True, slots=True)
class SecuritySettings:
    """
    Validated credential/session settings read once at startup.

    :param access_secret: Access-token signing key.
    :param refresh_secret: Refresh-token signing key.
    :param access_expires: Access-token lifetime.
    :param refresh_expires: Refresh-token lifetime.
    :param bcrypt_rounds: Password hashing work factor.
    :param password_min_length: Minimum password length for registration.
    :param rotate_refresh_tokens: Whether refresh consumes the presented token.
    :param algorithm: JWT signing algorithm.
    """

    access_secret: str = field(repr=False)
    refresh_secret: str = field(repr=False)
    access_expires: timedelta
    refresh_expires: timedelta
    bcrypt_rounds: int
    password_min_length: int
    rotate_refresh_tokens: bool = False
    algorithm: str = "HS256"


def load_security_settings(config: Mapping[str, Any]) -> SecuritySettings:
    """Validate and assemble :class:`SecuritySettings` from a Flask config.

    :param config: Mapping such as ``app.config``.
    :returns: Validated settings.
    :raises ConfigurationError: On missing secrets, shared secrets, bad
        durations, or an out-of-range work factor.
    """
    access_secret = (config.get("JWT_ACCESS_SECRET") or "").strip()
    refresh_secret = (config.get("JWT_REFRESH_SECRET") or "").strip()
    missing = [
        name
        for name, value in (
            ("JWT_ACCESS_SECRET", access_secret),
            ("JWT_REFRESH_SECRET", refresh_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing required secret(s): {', '.join(missing)}")
    if access_secret == refresh_secret:
        raise ConfigurationError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ.")

    try:
        rounds = int(config.get("BCRYPT_ROUNDS", 10))
        min_length = int(config.get("PASSWORD_MIN_LENGTH", 8))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("BCRYPT_ROUNDS and PASSWORD_MIN_LENGTH must be integers.") from exc
    if not MIN_BCRYPT_ROUNDS <= rounds <= MAX_BCRYPT_ROUNDS:
        raise ConfigurationError(
            f"BCRYPT_ROUNDS must be between {MIN_BCRYPT_ROUNDS} and {MAX_BCRYPT_ROUNDS}."
        )
    if min_length < 1:
        raise ConfigurationError("PASSWORD_MIN_LENGTH must be positive.")

    return SecuritySettings(
        access_secret=access_secret,
        refresh_secret=refresh_secret,
        access_expires=parse_duration(config.get("ACCESS_TOKEN_EXPIRES", "30m")),
        refresh_expires=parse_duration(config.get("REFRESH_TOKEN_EXPIRES", "7d")),
        bcrypt_rounds=rounds,
        password_min_length=min_length,
        rotate_refresh_tokens=as_bool(config.get("REFRESH_TOKEN_ROTATION", False)),
        algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
    )
