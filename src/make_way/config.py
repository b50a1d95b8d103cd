"""Configuration for Make Way.

Settings come from three layers, later layers winning:

  1. Built-in defaults (the constants below)
  2. An optional YAML file (``MAKE_WAY_CONFIG`` or an explicit path)
  3. ``MAKE_WAY_*`` environment variables, one per setting

Example YAML::

    default_gap: 40
    max_proximity_gap: 100
    strategy: ripple
    log_level: DEBUG
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


# --- Defaults ---

# Gap suggested when the selection has no right-hand neighbour.
DEFAULT_GAP = 40

# Traversal strategy: candidates further than this beyond the projected
# edge are treated as structurally remote and left alone.
MAX_PROXIMITY_GAP = 100

PLACEHOLDER_NAME = "MAKE_WAY_TEMP_Z"
PLACEHOLDER_OPACITY = 0.001
PLACEHOLDER_FILL = "#FF0000"

OUTPUT_DIR = Path.home() / ".make_way"

ENV_PREFIX = "MAKE_WAY_"
CONFIG_ENV_VAR = "MAKE_WAY_CONFIG"


class MakeWaySettings(BaseModel):
    """Tunable settings.

    Attributes:
        default_gap: Fallback gap for suggestions, in pixels.
        max_proximity_gap: Proximity threshold for the traversal strategy.
        strategy: Which make-way strategy to run ("ripple" or "traversal").
        placeholder_name: Name given to the temporary gap marker.
        placeholder_opacity: Opacity of the gap marker.
        output_dir: Where the server writes YAML and PNG output.
        log_level: Root logging level used by the entry point.
    """
    default_gap: float = Field(default=DEFAULT_GAP, gt=0)
    max_proximity_gap: float = Field(default=MAX_PROXIMITY_GAP, ge=0)
    strategy: Literal["ripple", "traversal"] = "ripple"
    placeholder_name: str = PLACEHOLDER_NAME
    placeholder_opacity: float = Field(default=PLACEHOLDER_OPACITY, ge=0, le=1)
    output_dir: Path = OUTPUT_DIR
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level: {value}")
        return value


def load_settings(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MakeWaySettings:
    """Build settings from defaults, an optional YAML file and the environment."""
    env = os.environ if environ is None else environ
    data: dict = {}

    config_path = path or env.get(CONFIG_ENV_VAR)
    if config_path:
        loaded = yaml.safe_load(Path(config_path).read_text())
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        data.update(loaded)

    for name in MakeWaySettings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in env:
            data[name] = env[key]

    return MakeWaySettings(**data)
