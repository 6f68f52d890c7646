# src/taskmaster/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every path lives under a single (gitignored) data directory by default.
- Nothing is read from disk except the optional .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKMASTER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_path: Path
    completed_path: Path
    reports_dir: Path
    log_dir: Path

    # ---- Project analyzer ----
    project_root: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Taskmaster").strip() or "Taskmaster"
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path(".taskmaster"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "tasks.json")
        completed_path = _env_path(_k("COMPLETED_PATH"), data_dir / "completed.json")
        reports_dir = _env_path(_k("REPORTS_DIR"), data_dir / "reports")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        project_root = _env_path(_k("PROJECT_ROOT"), Path("."))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_path=tasks_path,
            completed_path=completed_path,
            reports_dir=reports_dir,
            log_dir=log_dir,
            project_root=project_root,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
