"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:        str = "docsnav"
    db_url:          str = "sqlite:///docsnav.db"
    nav_title:       str = Field(default="Documentation", description="Title of a project's empty navigation")
    nav_version:     str = Field(default="1.0",           description="Version string of a project's empty navigation")
    search_limit:    int = Field(default=20, ge=1,        description="Max document matches returned by search")
    conflict_policy: str = Field(default="overwrite", pattern="^(overwrite|reject)$",
                                 description="overwrite: last write wins; reject: stale revisions fail")
    log_level:       str = Field(default="INFO",          description="Root log level used by the CLI")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then DOCSNAV_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"DOCSNAV_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
