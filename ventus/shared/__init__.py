"""Shared utilities for the weather station services."""

from .models import (
    ChildDevice,
    ConversionRule,
    Normalized,
    ParentDevice,
    SensorDefinition,
    SensorEntity,
    SensorKind,
    WeatherPayload,
)
from .database import DBConfig
from .config import load_yaml_config
from .exceptions import (
    ConversionError,
    DeviceDisabledError,
    DeviceNotFoundError,
    PayloadError,
    StoreWriteError,
    VentusError,
)
from .logging import setup_logging

__all__ = [
    "ChildDevice",
    "ConversionRule",
    "Normalized",
    "ParentDevice",
    "SensorDefinition",
    "SensorEntity",
    "SensorKind",
    "WeatherPayload",
    "DBConfig",
    "load_yaml_config",
    "ConversionError",
    "DeviceDisabledError",
    "DeviceNotFoundError",
    "PayloadError",
    "StoreWriteError",
    "VentusError",
    "setup_logging",
]
