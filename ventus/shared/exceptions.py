"""Exceptions raised by the weather station services."""


class VentusError(Exception):
    """Base exception for the weather station services."""

    pass


class DeviceDisabledError(VentusError):
    """Raised when the parent station device is disabled."""

    pass


class DeviceNotFoundError(VentusError):
    """Raised when a device no longer exists in the device store."""

    pass


class ConversionError(VentusError, ValueError):
    """Raised when a payload field cannot be converted to a number."""

    pass


class StoreWriteError(VentusError):
    """Raised when the device store rejects a write."""

    pass


class PayloadError(VentusError):
    """Raised when an inbound payload cannot be decoded."""

    pass
