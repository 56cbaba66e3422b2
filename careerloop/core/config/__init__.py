from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    loop_rate_limit: str
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    ai_provider: str
    ai_model: str
    ai_timeout_s: float
    ai_retry_attempts: int
    ai_retry_base_delay_s: float
    ai_retry_max_delay_s: float
    loop_db_path: str
    loop_retention_days: int
    loop_max_iterations: int
    loop_target_score: int
    loop_min_improvement: int
    resume_max_upload_bytes: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    loop_rate_limit=_get_env("LOOP_RATE_LIMIT", "20/minute") or "20/minute",
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    ai_provider=(_get_env("AI_PROVIDER", "gemini") or "gemini").strip().lower(),
    ai_model=(_get_env("AI_MODEL", "") or "").strip(),
    ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 60.0),
    ai_retry_attempts=_get_env_int("AI_RETRY_ATTEMPTS", 1),
    ai_retry_base_delay_s=_get_env_float("AI_RETRY_BASE_DELAY_S", 0.5),
    ai_retry_max_delay_s=_get_env_float("AI_RETRY_MAX_DELAY_S", 8.0),
    loop_db_path=_get_env("LOOP_DB_PATH", "data/loops.db") or "data/loops.db",
    loop_retention_days=_get_env_int("LOOP_RETENTION_DAYS", 30),
    loop_max_iterations=_get_env_int("LOOP_MAX_ITERATIONS", 5),
    loop_target_score=_get_env_int("LOOP_TARGET_SCORE", 85),
    loop_min_improvement=_get_env_int("LOOP_MIN_IMPROVEMENT", 2),
    resume_max_upload_bytes=_get_env_int("RESUME_MAX_UPLOAD_BYTES", 5 * 1024 * 1024),
)

if settings.ai_retry_attempts < 1:
    raise RuntimeError("AI_RETRY_ATTEMPTS must be at least 1.")

if settings.loop_max_iterations < 1:
    raise RuntimeError("LOOP_MAX_ITERATIONS must be a positive integer.")

if not 0 <= settings.loop_target_score <= 100:
    raise RuntimeError("LOOP_TARGET_SCORE must be between 0 and 100.")

__all__ = ["Settings", "settings"]
