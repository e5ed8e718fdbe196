"""
Environment override loading helpers.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _load_dotenv() -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=True)


_load_dotenv()


class EnvironmentOverrides(BaseModel):
    """
    Values read from environment variables (or a project .env file).

    Attributes:
        root: Output directory, overriding the config file.
        log_level: Logging level, overriding the --log-level option.
    """
    root: Optional[Path] = Field(default=None, alias="PRETTYDIST_ROOT")
    log_level: Optional[str] = Field(default=None, alias="PRETTYDIST_LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
    }


@lru_cache(maxsize=1)
def get_environment() -> EnvironmentOverrides:
    """
    Load overrides from environment/.env exactly once.
    """
    values = {field.alias: os.getenv(field.alias) or None for field in EnvironmentOverrides.model_fields.values()}
    return EnvironmentOverrides(**values)
