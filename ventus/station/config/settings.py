from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ventus.shared.config import get_log_level, load_yaml_config
from ventus.shared.database import DBConfig

STORE_TYPES = ("memory", "mysql")


@dataclass
class Config:
    parent_id: int
    store: str
    db_config: DBConfig
    parent_name: str = "Ventus W830"
    log_level: str = "INFO"


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """Load station configuration from YAML with environment variable support.

    Args:
        path: Config file path. If None, config/config-{VENTUS_ENV}.yaml.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If parent_id is missing or store is unknown.
    """
    config_data = load_yaml_config(path)

    if "parent_id" not in config_data:
        raise ValueError("Config is missing required key: parent_id")

    store = config_data.get("store", "mysql")
    if store not in STORE_TYPES:
        raise ValueError(f"Unsupported store type: {store}")

    return Config(
        parent_id=int(config_data["parent_id"]),
        store=store,
        db_config=DBConfig.from_env(),
        parent_name=config_data.get("parent_name", "Ventus W830"),
        log_level=get_log_level(config_data),
    )
