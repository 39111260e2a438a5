"""Configuration module for the registrar service."""

from registrar.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
