"""Application configuration: settings schema, config.yaml loader, and logging setup"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDXBLOCKS_"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    app_name:          str = "mdxblocks"
    registry_path:     str = Field(default="components.yaml", description="Component capability registry (YAML)")
    mode:              str = Field(default="fail-fast", pattern="^(fail-fast|collect)$", description="fail-fast or collect")
    parser_config:     str = Field(default="gfm-like",    description="MarkdownIt parser preset name")
    converter:         str = Field(default="lexical", pattern="^(lexical|fallback)$", description="Rich-text converter")
    output_dir:        str = Field(default="dist",        description="Directory for converted block JSON")
    output_format:     str = Field(default="blocks", pattern="^(blocks|payload)$", description="blocks or payload")
    allow_placeholder: bool = Field(default=False, description="Migrate components with status 'placeholder'")
    max_workers:       int = Field(default=1, ge=1, description="Documents converted in parallel")
    log_level:         str = Field(default="WARNING", description="Root log level")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDXBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)


def configure_logging(level: str | int = "WARNING") -> None:
    """Install a stderr handler on the root logger at the given level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
