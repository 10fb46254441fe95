from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - TASK_NAMESPACE: namespace tag mixed into every task address. Default 'task'
    - STORAGE_DEPOSIT_PER_BYTE: deposit charged per reserved byte. Default 6960
    - STORAGE_METADATA_OVERHEAD: bytes of substrate header per record. Default 128
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to resolve the caller from HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERS: comma-separated 'user:password' pairs
    - BASIC_AUTH_USERNAME / BASIC_AUTH_PASSWORD: single user, merged into BASIC_AUTH_USERS
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    persistence_backend: str
    sqlite_db_path: str
    task_namespace: str
    storage_deposit_per_byte: int
    storage_metadata_overhead: int
    cors_allow_origins: List[str]
    enable_basic_auth: bool
    basic_auth_users: Dict[str, str] = field(default_factory=dict)
    log_level: str = "INFO"


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


def _parse_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


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


def _parse_users(users_value: str, single_user: Optional[str], single_pass: Optional[str]) -> Dict[str, str]:
    """
    Parse 'user:password' pairs. Entries without a colon are ignored.
    """
    users: Dict[str, str] = {}
    for entry in users_value.split(","):
        name, sep, password = entry.strip().partition(":")
        if sep and name:
            users[name] = password
    if single_user and single_pass is not None:
        users[single_user] = single_pass
    return users


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    sqlite_path = _get_env("SQLITE_DB_PATH", "./data/tasks.db").strip()
    namespace = _get_env("TASK_NAMESPACE", "task").strip() or "task"
    cors_raw = _get_env("CORS_ALLOW_ORIGINS", "*")

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)
    users: Dict[str, str] = {}
    if enable_basic_auth:
        users = _parse_users(
            _get_env("BASIC_AUTH_USERS", ""),
            os.getenv("BASIC_AUTH_USERNAME"),
            os.getenv("BASIC_AUTH_PASSWORD"),
        )

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=sqlite_path,
        task_namespace=namespace,
        storage_deposit_per_byte=_parse_int("STORAGE_DEPOSIT_PER_BYTE", 6960),
        storage_metadata_overhead=_parse_int("STORAGE_METADATA_OVERHEAD", 128),
        cors_allow_origins=_parse_origins(cors_raw),
        enable_basic_auth=enable_basic_auth,
        basic_auth_users=users,
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
