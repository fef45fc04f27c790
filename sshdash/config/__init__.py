"""Configuration types and loading."""

from .loader import ConfigError, find_config_file, load_config
from .protocol import (
    Config,
    Defaults,
    InventoryConfig,
    NetworkConfig,
    Options,
)

__all__ = [
    "Config",
    "ConfigError",
    "Defaults",
    "InventoryConfig",
    "NetworkConfig",
    "Options",
    "find_config_file",
    "load_config",
]
