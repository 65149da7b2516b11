"""
Runtime settings read from the environment (and an optional ``.env`` file).
"""

import os
from typing import Literal, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "data.db")


class Settings(BaseModel):
    storage: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = DEFAULT_DB_PATH
    db_timeout: float = Field(default=5.0, gt=0, description="Seconds a persistence call may wait")
    lock_timeout: float = Field(default=10.0, gt=0, description="Seconds to wait for a doctor's schedule")
    seed_demo: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))
        values = {
            "storage": os.getenv("MEDSLOT_STORAGE"),
            "db_path": os.getenv("MEDSLOT_DB_PATH"),
            "db_timeout": os.getenv("MEDSLOT_DB_TIMEOUT"),
            "lock_timeout": os.getenv("MEDSLOT_LOCK_TIMEOUT"),
            "seed_demo": os.getenv("MEDSLOT_SEED_DEMO"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_file": os.getenv("LOG_FILE") or None,
        }
        # unset variables fall back to the field defaults
        return cls(**{k: v for k, v in values.items() if v is not None})
