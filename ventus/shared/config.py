"""Configuration file loading."""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"


def default_config_path() -> Path:
    """Return config/config-{VENTUS_ENV}.yaml at the repo root ('ventus' when unset)."""
    return CONFIG_DIR / f"config-{os.getenv('VENTUS_ENV', 'ventus')}.yaml"


def load_yaml_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """Load .env into the environment, then read the YAML config.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
    """
    load_dotenv()

    config_path = Path(config_path) if config_path is not None else default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def get_log_level(config: dict) -> str:
    return str(config.get("log_level", "INFO")).upper()
