"""Device store backends."""

from .base import DeviceStore
from .memory import MemoryDeviceStore
from .mysql import MySQLDeviceStore

__all__ = [
    "DeviceStore",
    "MemoryDeviceStore",
    "MySQLDeviceStore",
]
