"""
Runtime settings read from the environment.

Every value has a local-development default except `DATABASE_URL`.
"""

from __future__ import annotations

import os

DEFAULT_API_PREFIX = "/api/v1"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def api_prefix() -> str:
    prefix = env_str("API_PREFIX", DEFAULT_API_PREFIX).rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def pool_min_size() -> int:
    return max(1, env_int("DB_POOL_MIN_SIZE", 1))


def pool_max_size() -> int:
    return max(pool_min_size(), env_int("DB_POOL_MAX_SIZE", 5))


def command_timeout_s() -> int:
    return env_int("DB_COMMAND_TIMEOUT_S", 30)


def host() -> str:
    return env_str("API_HOST", "127.0.0.1")


def port() -> int:
    return env_int("API_PORT", 8000)
