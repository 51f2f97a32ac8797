"""Harness configuration."""

from cfi_harness.core.config.harness_config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    HarnessConfig,
    find_config_path,
    load_harness_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "HarnessConfig",
    "find_config_path",
    "load_harness_config",
]
