"""Typed, layered application configuration."""

__version__ = "0.1.0"
