"""
Runtime configuration for Asha Journey.

Settings come from environment variables, optionally supplied through a
`.env` file in the project root:

- ASHA_BYPASS_MODE: "1"/"true"/"yes" unlocks every realm in a fresh snapshot
- ASHA_LOCK_POLICY: "sequential" (default) or "open"
- ASHA_PROGRESS_DB: path to progress.db (default: ~/.ashajourney/progress.db)
- ASHA_CATALOG_PATH: alternative catalog YAML file
- ASHA_LOG_LEVEL: logging level name (default: INFO)
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_PROGRESS_DIR = Path.home() / ".ashajourney"
DEFAULT_PROGRESS_DB = DEFAULT_PROGRESS_DIR / "progress.db"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


class LockPolicy(str, Enum):
    """How missions inside an unlocked realm are gated."""
    SEQUENTIAL = "sequential"   # previous mission must be completed
    OPEN = "open"               # every mission of an unlocked realm is open


class Settings(BaseModel):
    bypass_mode: bool = False
    lock_policy: LockPolicy = LockPolicy.SEQUENTIAL
    progress_db: Path = DEFAULT_PROGRESS_DB
    catalog_path: Optional[Path] = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v):
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


def parse_bool(value: str) -> bool:
    """Parse a boolean environment value."""
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


def load_settings(env: Optional[Mapping[str, str]] = None, env_file: Optional[Path] = None) -> Settings:
    """
    Build settings from the environment.

    Args:
        env: Mapping to read instead of os.environ (no .env loading then)
        env_file: .env file to load first (default: PROJECT_ROOT / ".env")

    Raises:
        ValueError: If a variable holds an invalid value
    """
    if env is None:
        load_dotenv(env_file or PROJECT_ROOT / ".env")
        env = os.environ

    values: dict = {}
    if "ASHA_BYPASS_MODE" in env:
        values["bypass_mode"] = parse_bool(env["ASHA_BYPASS_MODE"])
    if env.get("ASHA_LOCK_POLICY"):
        values["lock_policy"] = LockPolicy(env["ASHA_LOCK_POLICY"].strip().lower())
    if env.get("ASHA_PROGRESS_DB"):
        values["progress_db"] = Path(env["ASHA_PROGRESS_DB"]).expanduser()
    if env.get("ASHA_CATALOG_PATH"):
        values["catalog_path"] = Path(env["ASHA_CATALOG_PATH"]).expanduser()
    if env.get("ASHA_LOG_LEVEL"):
        values["log_level"] = env["ASHA_LOG_LEVEL"]

    return Settings(**values)
