"""Runtime settings for paramigrate.

Settings are read from ``config/paramigrate.yaml`` (or the directory named
by ``PARAMIGRATE_CONFIG_DIR``) and validated with pydantic.  A missing
file means defaults.  ``PARAMIGRATE_ENVIRONMENT`` overrides the target
environment written into generated provider blocks.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from . import constants

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "paramigrate.yaml"


class TargetSettings(BaseModel):
    """What the migration produces."""

    package: str = constants.TARGET_PACKAGE
    core_package: str = constants.TARGET_CORE_PACKAGE
    stylesheet: str = constants.TARGET_STYLESHEET
    version: str = constants.TARGET_VERSION
    provider_component: str = constants.TARGET_PROVIDER_COMPONENT
    modal_component: str = constants.TARGET_MODAL_COMPONENT
    environment: Literal["development", "production"] = "development"


class Settings(BaseModel):
    target: TargetSettings = Field(default_factory=TargetSettings)
    strategy_priority: List[str] = Field(
        default_factory=lambda: list(constants.DEFAULT_STRATEGY_PRIORITY)
    )

    @field_validator("strategy_priority")
    @classmethod
    def _known_strategies(cls, value: List[str]) -> List[str]:
        unknown = [name for name in value if name not in constants.DEFAULT_STRATEGY_PRIORITY]
        if unknown:
            raise ValueError(f"Unknown strategies in strategy_priority: {unknown}")
        if len(set(value)) != len(value):
            raise ValueError("strategy_priority must not repeat a strategy")
        return value


def get_config_path() -> Path:
    """Directory holding ``paramigrate.yaml``."""
    override = os.getenv("PARAMIGRATE_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent / "config"


def load_settings(config_dir: Path | None = None) -> Settings:
    """Load settings from YAML, applying environment overrides."""
    config_file = (config_dir or get_config_path()) / CONFIG_FILE_NAME
    data: dict = {}
    if config_file.exists():
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.warning(f"{CONFIG_FILE_NAME} not found at {config_file}, using defaults")

    env_override = os.getenv("PARAMIGRATE_ENVIRONMENT")
    if env_override:
        data.setdefault("target", {})["environment"] = env_override.lower()

    return Settings.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
