from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - SQLITE_DB_PATH: path to the sqlite db file. Default './data/simple_todo_note.db'
    - DB_LOCK_TIMEOUT: seconds to wait for the database lock. Default 5
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level. Default 'INFO'
    - LOG_DIR: directory for the rotating log file. Default './data/logs'
    - LOG_BACKUP_COUNT: rotated log files to keep. Default 7
    - LOG_ACCESS: 'true' to keep uvicorn access logs (default: false)
    - API_HOST / API_PORT: bind address for `python -m todo_note`. Default 127.0.0.1:8765
    """

    sqlite_db_path: str = "./data/simple_todo_note.db"
    db_lock_timeout: float = 5.0
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_dir: str = "./data/logs"
    log_backup_count: int = 7
    log_access: bool = False
    api_host: str = "127.0.0.1"
    api_port: int = 8765


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value.strip())
    except ValueError:
        return default


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/simple_todo_note.db").strip(),
        db_lock_timeout=_parse_float(_get_env("DB_LOCK_TIMEOUT", "5"), 5.0),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_dir=_get_env("LOG_DIR", "./data/logs").strip(),
        log_backup_count=max(0, _parse_int(_get_env("LOG_BACKUP_COUNT", "7"), 7)),
        log_access=_parse_bool(_get_env("LOG_ACCESS", "false"), False),
        api_host=_get_env("API_HOST", "127.0.0.1").strip(),
        api_port=_parse_int(_get_env("API_PORT", "8765"), 8765),
    )
