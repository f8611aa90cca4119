"""
Runtime settings.

All settings come from environment variables, with package defaults:

    COURSEREGISTRY_DATA_DIR          directory holding the slot files
    COURSEREGISTRY_CASCADE_STUDENTS  also drop students when a course / course type delete removes their offering
    COURSEREGISTRY_LOG_LEVEL         DEBUG, INFO, WARNING (default) or ERROR
    COURSEREGISTRY_LOG_FILE          optional log file (rotating)

CLI flags override these values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from courseregistry.storage import default_data_dir

ENV_PREFIX = "COURSEREGISTRY_"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    data_dir: Path
    cascade_students: bool = False
    log_level: str = "WARNING"
    log_file: Optional[Path] = None


def _env_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment (os.environ unless `env` is given).
    """
    if env is None:
        env = os.environ

    data_dir_raw = (env.get(ENV_PREFIX + "DATA_DIR") or "").strip()
    log_file_raw = (env.get(ENV_PREFIX + "LOG_FILE") or "").strip()
    log_level = (env.get(ENV_PREFIX + "LOG_LEVEL") or "").strip().upper() or "WARNING"

    return Settings(
        data_dir=Path(data_dir_raw) if data_dir_raw else default_data_dir(),
        cascade_students=_env_bool(env.get(ENV_PREFIX + "CASCADE_STUDENTS")),
        log_level=log_level,
        log_file=Path(log_file_raw) if log_file_raw else None,
    )
