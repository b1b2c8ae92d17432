"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use JBST_ prefix (e.g., JBST_DEFAULT_NAMESPACE=MyApp).

Settings can also be loaded from a .env file in the project root.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when the app settings file cannot be loaded"""
    pass


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use JBST_ prefix.

    Examples:
        JBST_DEFAULT_NAMESPACE=MyApp
        JBST_STRICT_MODE=true
        JBST_APP_SETTINGS='{"siteTitle": "Example"}'
        JBST_APP_SETTINGS_FILE=config/appsettings.yaml
    """

    model_config = SettingsConfigDict(
        env_prefix="JBST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Compiler configuration
    default_namespace: Optional[str] = Field(
        default=None,
        description="Namespace prepended to file-derived template names",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: unknown jbst: commands are errors instead of warnings",
    )

    # Extension configuration
    app_settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Values inlined by <%$ AppSettings: key %> (JSON object)",
    )

    app_settings_file: Optional[str] = Field(
        default=None,
        description="YAML mapping merged under app_settings for <%$ AppSettings: key %>",
    )

    resource_lookup: str = Field(
        default="JsonFx.Lang.get",
        description="Runtime function called by <%$ Resources: key %>",
    )

    # File configuration
    source_extension: str = Field(
        default=".jbst",
        description="Extension of template sources picked up from inputdir",
    )

    output_extension: str = Field(
        default=".js",
        description="Extension of compiled script files",
    )

    def appSettings_load(self) -> Dict[str, Any]:
        """
        Resolve the AppSettings extension values.

        Values from app_settings_file are loaded first; app_settings
        entries override them.

        Returns:
            Mapping of setting name to value

        Raises:
            ConfigError: If the settings file is missing, unparsable or not a mapping
        """
        values: Dict[str, Any] = {}
        if self.app_settings_file:
            path = Path(self.app_settings_file)
            if not path.exists():
                raise ConfigError(f"App settings file not found: {path}")
            try:
                with open(path, "r", encoding="utf-8") as f:
                    loaded: Any = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to parse {path}: {e}")
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ConfigError(f"App settings file must hold a mapping: {path}")
            values.update(loaded)
        values.update(self.app_settings)
        return values

    def outputName_make(self, source: Path) -> Path:
        """
        Output path of a compiled template, relative like its source.

        Example:
            >>> AppSettings().outputName_make(Path('views/List.jbst'))
            PosixPath('views/List.js')
        """
        return source.with_suffix(self.output_extension)


# Singleton instance - import this in your code
appsettings = AppSettings()
