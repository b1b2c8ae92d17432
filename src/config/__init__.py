"""
Configuration package for jbst

Provides application settings via environment variables using pydantic-settings.
"""

from .settings import appsettings, AppSettings, ConfigError

__all__ = ["appsettings", "AppSettings", "ConfigError"]
