"""
Configuration settings for Yoke.

This module provides the process-wide runtime settings using Pydantic
settings. One instance is created at startup and passed by reference to
every component that needs it; the command invoker updates it once, at
dispatch time, from the global ``--debug`` and ``--dev`` flags.
"""

from typing import Optional, Dict, Any, Tuple, Type
from pathlib import Path
import logging

import commentjson
from pydantic import Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def user_settings_path() -> Path:
    """Path to the optional user settings file."""
    return Path.home() / ".config" / "yoke" / "settings.json"


class JsonFileSettingsSource(PydanticBaseSettingsSource):
    """
    Settings source reading a JSON file that may contain comments.

    Missing or unreadable files contribute nothing; keys that are not
    settings fields are ignored.
    """

    def __init__(self, settings_cls: Type[BaseSettings], path: Optional[Path] = None):
        super().__init__(settings_cls)
        self.path = path or user_settings_path()
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = commentjson.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, commentjson.JSONLibraryException, commentjson.ParserException) as e:
            logger.warning(f"Ignoring settings file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {self.path}: not a JSON object")
            return {}
        return data

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                values[key] = value
        return values


class YokeSettings(BaseSettings):
    """
    Runtime settings for Yoke.

    Settings are loaded from multiple sources in order of preference:
    1. Explicit keyword arguments
    2. Environment variables (prefixed with YOKE_SETTINGS_)
    3. .env file in the working directory
    4. User settings file (~/.config/yoke/settings.json)
    5. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="YOKE_SETTINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    environment: str = Field(
        default="production",
        description="Target Aerobatic environment"
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level when debug is off"
    )

    credentials_file: Path = Field(
        default_factory=lambda: Path.home() / ".aerobatic",
        description="Per-user credentials file written by 'yoke login'"
    )

    manifest_name: str = Field(
        default="package.json",
        description="Project manifest file name"
    )

    host: str = Field(
        default="127.0.0.1",
        description="Interface the local server binds to"
    )

    default_port: int = Field(
        default=3000,
        description="Port for the local server when --port is not given",
        ge=0,
        le=65535
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment name."""
        valid_environments = {"production", "dev"}
        v_lower = v.lower()
        if v_lower not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Valid environments: {', '.join(sorted(valid_environments))}"
            )
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Valid levels: {', '.join(sorted(valid_levels))}")
        return v_upper

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonFileSettingsSource(settings_cls),
        )

    @property
    def is_dev(self) -> bool:
        """Whether commands target the development environment."""
        return self.environment == "dev"

    @property
    def effective_log_level(self) -> int:
        """Logging level implied by the debug flag and log_level."""
        if self.debug:
            return logging.DEBUG
        return logging.getLevelName(self.log_level)

    def manifest_path(self, working_directory: Optional[Path] = None) -> Path:
        """Path to the project manifest in a directory."""
        return Path(working_directory or Path.cwd()) / self.manifest_name

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        data = self.model_dump()
        data["credentials_file"] = str(self.credentials_file)
        return data


def get_settings() -> YokeSettings:
    """Get the current Yoke settings.

    Raises:
        ConfigurationError: A settings source holds an invalid value
    """
    try:
        return YokeSettings()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigurationError(f"Invalid settings: {problems}", original_error=e) from e
