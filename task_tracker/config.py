from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()

_TRUTHY = {"1", "true", "yes", "on"}


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    storage_path: str = "data/todos.json"
    storage_key: str = "todos"
    seed_defaults: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"

    def resolve(self, relative: str) -> Path:
        path = Path(relative)
        return path if path.is_absolute() else PROJECT_ROOT / path


def settings_from_env() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "").strip() or None,
        storage_path=os.getenv("STORAGE_PATH", "data/todos.json"),
        storage_key=os.getenv("STORAGE_KEY", "todos"),
        seed_defaults=os.getenv("SEED_DEFAULTS", "false").strip().lower() in _TRUTHY,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
    )


load_env()

SETTINGS = settings_from_env()
