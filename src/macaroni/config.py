"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MACARONI_"


class Settings(BaseModel):
    app_name:    str  = "macaroni"
    json_indent: int  = Field(default=2, ge=0, description="JSON indent width; 0 = compact single line")
    output_dir:  str  = Field(default="dist", description="Directory for exported JSON files")
    log_level:   str  = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    blocks_only: bool = Field(default=False, description="Omit inlineElements from JSON output")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MACARONI_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    config_path = Path(CONFIG_FILE)
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
