"""Ventus W830 weather station integration."""

__version__ = "0.1.0"
