"""Codex Sessions Configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_path(name: str) -> Path | None:
    value = (os.getenv(name) or "").strip()
    if not value:
        return None
    return Path(value).expanduser()

# Codex data directory; None means <home>/.codex
CODEX_HOME = _env_path("CODEX_SESSIONS_CODEX_HOME")
LIVE_SESSIONS_DIRNAME = "sessions"
ARCHIVED_SESSIONS_DIRNAME = "archived_sessions"
LIVE_SESSION_SUFFIX = ".jsonl"

# Listing behaviour
STRICT_ARCHIVE_PARSE = _env_bool("CODEX_SESSIONS_STRICT_ARCHIVE_PARSE", False)
READ_TIMEOUT_SECONDS = _env_float("CODEX_SESSIONS_READ_TIMEOUT_SECONDS", 0.0)
WATCH_ENABLED = _env_bool("CODEX_SESSIONS_WATCH_ENABLED", True)

# Observability
OTEL_ENABLED = _env_bool("CODEX_SESSIONS_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("CODEX_SESSIONS_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("CODEX_SESSIONS_OTEL_SERVICE_NAME", "codex-sessions")
PROM_PORT = _env_int("CODEX_SESSIONS_PROM_PORT", 9464)

# Server settings
HOST = os.getenv("CODEX_SESSIONS_HOST", "127.0.0.1")
PORT = _env_int("CODEX_SESSIONS_PORT", 8000)

# CORS
FRONTEND_ORIGIN = os.getenv("CODEX_SESSIONS_FRONTEND_ORIGIN", "http://localhost:3000")
