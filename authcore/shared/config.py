from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from authcore.domain.exceptions import ConfigurationError


load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str, default: str) -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_duration(value: str) -> timedelta:
    """Parse "3600", "15m", "1h", "7d" or "2w" into a timedelta."""
    match = _DURATION_RE.match(value or "")
    if match is None:
        raise ConfigurationError(f"Invalid duration: {value!r}.")
    amount = int(match.group(1))
    if amount <= 0:
        raise ConfigurationError(f"Duration must be positive: {value!r}.")
    unit = _DURATION_UNITS[match.group(2).lower()]
    return timedelta(**{unit: amount})


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    jwt_access_ttl: timedelta
    jwt_refresh_ttl: timedelta
    postgres_dsn: str
    auto_create_schema: bool
    google_client_id: str
    facebook_app_id: str
    linkedin_client_id: str
    cors_allow_origins: tuple[str, ...]
    refresh_cookie_secure: bool
    log_level: str

    @property
    def enabled_providers(self) -> tuple[str, ...]:
        configured = {
            "google": self.google_client_id,
            "facebook": self.facebook_app_id,
            "linkedin": self.linkedin_client_id,
        }
        return tuple(name for name, client_id in configured.items() if client_id)


def get_settings() -> Settings:
    jwt_secret = (_env("JWT_SECRET", "") or "").strip()
    if not jwt_secret:
        raise ConfigurationError("JWT_SECRET environment variable is not set.")

    return Settings(
        jwt_secret=jwt_secret,
        jwt_access_ttl=parse_duration(_env("JWT_ACCESS_EXPIRATION", "1h")),
        jwt_refresh_ttl=parse_duration(_env("JWT_REFRESH_EXPIRATION", "7d")),
        postgres_dsn=_env("POSTGRES_DSN", ""),
        auto_create_schema=_bool("AUTO_CREATE_SCHEMA", False),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        facebook_app_id=_env("FACEBOOK_APP_ID", ""),
        linkedin_client_id=_env("LINKEDIN_CLIENT_ID", ""),
        cors_allow_origins=_csv("CORS_ALLOW_ORIGINS", "*"),
        refresh_cookie_secure=_bool("REFRESH_COOKIE_SECURE", False),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
