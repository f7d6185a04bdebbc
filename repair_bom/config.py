"""Application configuration values and helpers.

Centralizes runtime configuration for:
  - Database URL holding the BOM catalog (local SQLite file or server URL)
  - Logging level and log directory

Values can be provided via environment variables or a user settings file at
``~/.repair_bom/settings.toml``.

Environment variables (quick overrides):
  - DATABASE_URL: full SQLAlchemy URL; overrides settings.toml
  - REPAIR_BOM_SETTINGS_PATH: location of settings.toml
  - REPAIR_BOM_LOG_LEVEL: logging level name (DEBUG, INFO, ...)
  - REPAIR_BOM_LOG_DIR: directory for traceback logs
"""

from __future__ import annotations

import atexit
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from sqlalchemy.engine import Engine, make_url
from sqlmodel import create_engine

BASE_DIR = Path(__file__).resolve().parent
REPO_ROOT = BASE_DIR.parent


def _determine_settings_path() -> Path:
    override = os.getenv("REPAIR_BOM_SETTINGS_PATH")
    if override:
        return Path(override).expanduser().resolve()
    runtime_settings = REPO_ROOT / "settings.toml"
    if runtime_settings.exists():
        return runtime_settings
    return (Path.home() / ".repair_bom" / "settings.toml").resolve()


SETTINGS_PATH = _determine_settings_path()


def _ensure_sqlite_directory(url: str) -> str:
    try:
        url_obj = make_url(url)
    except Exception:
        return url
    if url_obj.get_backend_name() != "sqlite":
        return url
    database = url_obj.database or ""
    if not database or database == ":memory:" or database.startswith("file:"):
        return url
    db_path = Path(database)
    if not db_path.is_absolute():
        db_path = (SETTINGS_PATH.parent / db_path).resolve()
        url_obj = url_obj.set(database=db_path.as_posix())
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return url_obj.render_as_string(hide_password=False)


DEFAULT_URL = f"sqlite:///{(SETTINGS_PATH.parent / 'repair_bom.db').as_posix()}"


def _ensure_settings() -> None:
    if not SETTINGS_PATH.exists():
        SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
        _write_settings_data({"database": {"url": DEFAULT_URL}})


def _read_settings_dict() -> Dict[str, Any]:
    _ensure_settings()
    try:
        with open(SETTINGS_PATH, "rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _write_settings_data(data: Dict[str, Any]) -> None:
    """Persist `data` into SETTINGS_PATH using TOML representation."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(SETTINGS_PATH, "w", encoding="utf-8") as handle:
        toml.dump(data, handle)


def _from_settings(section: str, key: str, default: str) -> str:
    data = _read_settings_dict()
    return str(((data.get(section) or {}).get(key)) or default)


def _value_from_env_or_settings(env: str, section: str, key: str, default: str) -> str:
    return os.getenv(env) or _from_settings(section, key, default)


def load_settings() -> str:
    """Return database URL from env or settings.toml."""
    url = os.getenv("DATABASE_URL")
    if not url:
        url = _read_settings_dict().get("database", {}).get("url")
    return _ensure_sqlite_directory(url or DEFAULT_URL)


DATABASE_URL = load_settings()
_ENGINE: Engine = create_engine(DATABASE_URL, echo=False)


def dispose_engine() -> None:
    """Dispose the global engine, releasing any pooled connections."""
    _ENGINE.dispose()


atexit.register(dispose_engine)


def get_engine(url: Optional[str] = None) -> Engine:
    """Return engine, recreating if the URL changed."""
    global _ENGINE, DATABASE_URL
    new_url = _ensure_sqlite_directory(url) if url is not None else load_settings()
    if new_url != DATABASE_URL:
        DATABASE_URL = new_url
        _ENGINE.dispose()
        _ENGINE = create_engine(DATABASE_URL, echo=False)
    return _ENGINE


def save_database_url(url: str) -> None:
    data = _read_settings_dict()
    database = dict(data.get("database", {}))
    database["url"] = _ensure_sqlite_directory(url)
    data["database"] = database
    _write_settings_data(data)
    get_engine(database["url"])


# ------------------------- Logging configuration -------------------------

LOG_LEVEL = _value_from_env_or_settings(
    "REPAIR_BOM_LOG_LEVEL", "logging", "level", "INFO"
).strip().upper()
LOG_DIR = Path(
    _value_from_env_or_settings(
        "REPAIR_BOM_LOG_DIR", "paths", "log_dir", str(SETTINGS_PATH.parent / "logs")
    )
).expanduser().resolve()
TRACEBACK_LOG_PATH = LOG_DIR / "tracebacks.log"
