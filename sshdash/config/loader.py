"""YAML configuration loading, parsing, and validation."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from .protocol import Config

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid."""


def find_config_file(config_path: str | None = None) -> Path | None:
    """Find the configuration file using search order.

    Order: explicit path > XDG_CONFIG_HOME > /etc/sshdash/

    An explicit path must exist. Otherwise ``None`` is returned
    when nothing is found, and callers fall back to defaults.
    """
    if config_path is not None:
        p = Path(config_path).expanduser()
        if not p.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        else:
            return p
    else:
        xdg = os.environ.get(
            "XDG_CONFIG_HOME",
            os.path.expanduser("~/.config"),
        )
        xdg_path = Path(xdg) / "sshdash" / "config.yaml"
        etc_path = Path("/etc/sshdash/config.yaml")
        if xdg_path.is_file():
            return xdg_path
        elif etc_path.is_file():
            return etc_path
        else:
            return None


def load_config(config_path: str | None = None) -> Config:
    """Load and validate configuration from a YAML file."""
    path = find_config_file(config_path)
    if path is None:
        logger.info("No config file found, using defaults")
        return Config()

    logger.debug("Loading config from %s", path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if raw is None:
        return Config()
    elif not isinstance(raw, dict):
        raise ConfigError("Config file must be a YAML mapping")
    else:
        try:
            config = Config.model_validate(raw)
        except Exception as e:
            raise ConfigError(str(e)) from e
        return config
