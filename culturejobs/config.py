"""Environment-driven settings for Culture Jobs.

Environment variables (optional)
--------------------------------
CULTUREJOBS_REQUEST_TIMEOUT (float, default 15)
    Seconds before an upstream request is abandoned.
CULTUREJOBS_DETAIL_CONCURRENCY (int, default 4)
    Ceiling on simultaneous detail-page fetches during a sync.
REDIS_URL
    External response cache. When unset the cache is process-local only.
CULTUREJOBS_CACHE_TTL (int, default 60)
    Seconds a cached job list stays fresh.
CULTUREJOBS_DATABASE_URL / DATABASE_URL (default "sqlite:///./culturejobs.db")
    `postgres://` and bare `postgresql://` URLs are pointed at the psycopg driver.
CULTUREJOBS_DB_POOL_SIZE (int, default 5), CULTUREJOBS_DB_MAX_OVERFLOW (int, default 10)
    Ignored for SQLite.
CULTUREJOBS_DB_ECHO ("1" to echo SQL)
CULTUREJOBS_LOG_LEVEL (default "INFO")

CULTUREJOBS_DOTENV (path to .env, default ".env")
    Variables from this file are loaded on import so the CLI and the API
    see the same settings. Real environment variables win.
"""
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv(dotenv_path=os.getenv("CULTUREJOBS_DOTENV", ".env"))


DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_DETAIL_CONCURRENCY = 4
DEFAULT_CACHE_TTL = 60
DEFAULT_DATABASE_URL = "sqlite:///./culturejobs.db"
DEFAULT_DB_POOL_SIZE = 5
DEFAULT_DB_MAX_OVERFLOW = 10


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def request_timeout() -> float:
    return _env_float("CULTUREJOBS_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)


def detail_concurrency() -> int:
    return max(_env_int("CULTUREJOBS_DETAIL_CONCURRENCY", DEFAULT_DETAIL_CONCURRENCY), 1)


def redis_url() -> Optional[str]:
    url = (os.getenv("REDIS_URL") or "").strip()
    return url or None


def cache_ttl() -> int:
    return max(_env_int("CULTUREJOBS_CACHE_TTL", DEFAULT_CACHE_TTL), 1)


def log_level() -> str:
    return (os.getenv("CULTUREJOBS_LOG_LEVEL") or "INFO").upper()


def database_url() -> str:
    url = (
        os.getenv("CULTUREJOBS_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or DEFAULT_DATABASE_URL
    ).strip()
    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def db_pool_size() -> int:
    return max(_env_int("CULTUREJOBS_DB_POOL_SIZE", DEFAULT_DB_POOL_SIZE), 1)


def db_max_overflow() -> int:
    return max(_env_int("CULTUREJOBS_DB_MAX_OVERFLOW", DEFAULT_DB_MAX_OVERFLOW), 0)


def db_echo() -> bool:
    return (os.getenv("CULTUREJOBS_DB_ECHO") or "").strip() == "1"
