"""Ventus W830 weather station sensor service."""

from .bootstrap import SensorCatalogBootstrapper
from .catalog import SENSOR_CATALOG
from .handler import StationHandler
from .normalizer import normalize


def create_store(config):
    """Build the device store named in the config."""
    from .stores import MemoryDeviceStore, MySQLDeviceStore

    if config.store == "memory":
        store = MemoryDeviceStore()
        store.add_parent(config.parent_id, config.parent_name)
        return store

    store = MySQLDeviceStore(config.db_config)
    store.ensure_schema()
    return store


def main():
    """Entry point for the station service.

    Reads one upload body per line from stdin. The config file defaults to
    config/config-{VENTUS_ENV}.yaml; VENTUS_CONFIG overrides the path.
    """
    import os
    import sys
    from .config.settings import load_config
    from .service import process_lines
    from ventus.shared.logging import setup_logging

    config = load_config(os.getenv("VENTUS_CONFIG"))
    setup_logging(config.log_level)

    store = create_store(config)
    handler = StationHandler(store, config.parent_id)
    handler.start()

    try:
        process_lines(handler, sys.stdin)
    except KeyboardInterrupt:
        pass
    finally:
        store.close()


__all__ = [
    "SensorCatalogBootstrapper",
    "SENSOR_CATALOG",
    "StationHandler",
    "normalize",
    "create_store",
    "main",
]
