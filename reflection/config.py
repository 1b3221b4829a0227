# reflection/config.py

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from logger import get_logger

log = get_logger("Reflection.Config")

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = Path(os.path.join(BASE_DIR, "config", "reflection.yaml"))


class ReflectionConfig(BaseModel):
    enabled: bool = True
    # deviated reflections per execution (a control always runs too)
    reflect_amount: int = Field(default=2, ge=0)
    # executions shadowed per class/method, 0 = unlimited
    reflect_limit: int = Field(default=10, ge=0)
    store_limit: int = Field(default=10000, ge=1)
    log_file: Optional[str] = None
    # "Class.method" -> {inputs: [...], output: {...}}
    rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


def config_path() -> Path:
    override = os.environ.get("REFLECTION_CONFIG")
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_config(path: Union[str, Path, None] = None) -> ReflectionConfig:
    """
    Load the YAML config. A missing or invalid file falls back to defaults.
    """
    path = Path(path) if path is not None else config_path()

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        log.error({"event": "reflection_config_load_error", "path": str(path), "error": str(e)})
        return ReflectionConfig()

    try:
        return ReflectionConfig(**data)
    except (TypeError, ValidationError) as e:
        log.error({"event": "reflection_config_invalid", "path": str(path), "error": str(e)})
        return ReflectionConfig()
