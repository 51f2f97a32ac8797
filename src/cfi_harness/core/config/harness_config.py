"""Harness configuration loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CFI_HARNESS_CONFIG"
DEFAULT_CONFIG_PATH = Path(".cfi-harness") / "config.yaml"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class HarnessConfig(BaseModel):
    """Settings shared by every world built during a test session."""

    model_config = ConfigDict(extra="forbid")

    default_task_timeout_seconds: float = Field(default=30.0, gt=0)
    result_key: str = "result"
    echo_diagnostics: bool = True
    log_level: str = "WARNING"
    scenario_params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names in any case."""
        level = value.upper()
        if level not in _LOG_LEVELS:
            msg = f"log_level must be one of {sorted(_LOG_LEVELS)}, got '{value}'"
            raise ValueError(msg)
        return level

    @field_validator("result_key")
    @classmethod
    def validate_result_key(cls, value: str) -> str:
        """Result values need an addressable name."""
        if not value.strip():
            raise ValueError("result_key must not be empty")
        return value


def find_config_path(path: str | Path | None = None) -> Path | None:
    """Locate the config file to load.

    Args:
        path: Explicit path, takes priority over everything else

    Returns:
        Path of the config file, or None when defaults should be used

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
    """
    if path is not None:
        explicit = Path(path)
        if not explicit.exists():
            raise FileNotFoundError(f"Harness config not found: {path}")
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        from_env = Path(env_path)
        if not from_env.exists():
            raise FileNotFoundError(
                f"Harness config not found: {env_path} (from {CONFIG_ENV_VAR})"
            )
        return from_env

    local = Path.cwd() / DEFAULT_CONFIG_PATH
    if local.exists():
        return local

    return None


def load_harness_config(path: str | Path | None = None) -> HarnessConfig:
    """Load harness configuration from YAML, falling back to defaults.

    Args:
        path: Optional explicit config file

    Returns:
        Validated harness configuration

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
        ValueError: If the file is not valid YAML or fails validation
    """
    config_path = find_config_path(path)
    if config_path is None:
        logger.debug("No harness config file found, using defaults")
        return HarnessConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Harness config {config_path} must be a mapping")

    try:
        config = HarnessConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid harness config {config_path}: {e}") from e

    logger.debug("Loaded harness config from %s", config_path)
    return config
