from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from lazyhydrate.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_STRATEGY,
    FETCH_ATTEMPTS,
    FETCH_TIMEOUT_SECONDS,
    IDLE_FALLBACK_SECONDS,
)
from lazyhydrate.exceptions import ConfigError
from lazyhydrate.logging import get_logger

__all__ = [
    "AsyncOptions",
    "LazyHydrateConfig",
    "load_config",
    "get_user_config_path",
    "merge_options",
    "PROJECT_CONFIG_FILENAME",
]

logger = get_logger(__name__)

PROJECT_CONFIG_FILENAME = "lazyhydrate.yaml"

# Project config path chosen by load_config(), read by settings_customise_sources().
_project_config_path: ContextVar[Path | None] = ContextVar(
    "_project_config_path", default=None
)


class AsyncOptions(BaseModel):
    """Options controlling deferred activation.

    Attributes:
        default_strategy: Requirement string used when an element declares
            none (default: eager).
        keep_relative_urls: Leave relative module URLs untouched instead of
            resolving them against base_url (default: False).
        base_url: Base relative module URLs are resolved against.
        idle_fallback_seconds: Delay used by the ``idle`` strategy when the
            host has no idle callback (default: 0.2s).
        fetch_timeout_seconds: Timeout for fetching a module over HTTP.
        fetch_attempts: Attempts made when fetching a module over HTTP.

    Example lazyhydrate.yaml:
        options:
          default_strategy: "idle"
          keep_relative_urls: false
          base_url: "https://example.com/static/"
    """

    default_strategy: str = DEFAULT_STRATEGY
    keep_relative_urls: bool = False
    base_url: str = DEFAULT_BASE_URL
    idle_fallback_seconds: float = Field(default=IDLE_FALLBACK_SECONDS, ge=0.0, le=10.0)
    fetch_timeout_seconds: float = Field(default=FETCH_TIMEOUT_SECONDS, gt=0.0, le=300.0)
    fetch_attempts: int = Field(default=FETCH_ATTEMPTS, ge=1, le=10)

    @field_validator("default_strategy")
    @classmethod
    def check_default_strategy(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_strategy must not be empty")
        return v


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source reading a YAML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                ) from e
            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif not isinstance(loaded, dict):
                raise ConfigError(
                    message=f"Expected a mapping at the top of {yaml_file}",
                    value=loaded,
                )
            else:
                self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._config_data


class LazyHydrateConfig(BaseSettings):
    """Root configuration object."""

    model_config = SettingsConfigDict(
        env_prefix="LAZYHYDRATE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    options: AsyncOptions = Field(default_factory=AsyncOptions)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order settings sources, highest priority first.

        1. Init arguments (load_config passes none unless testing)
        2. Environment variables (LAZYHYDRATE_*)
        3. Project YAML config (path given to load_config, or ./lazyhydrate.yaml)
        4. User YAML config (~/.config/lazyhydrate/config.yaml)
        """
        project_config_path = _project_config_path.get() or (
            Path.cwd() / PROJECT_CONFIG_FILENAME
        )
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/lazyhydrate/config.yaml
    """
    return Path.home() / ".config" / "lazyhydrate" / "config.yaml"


def load_config(config_path: Path | None = None) -> LazyHydrateConfig:
    """Load configuration: defaults -> user -> project -> env.

    Args:
        config_path: Project config file. Defaults to ./lazyhydrate.yaml.

    Returns:
        LazyHydrateConfig with merged configuration.

    Raises:
        ConfigError: If configuration is invalid.
    """
    if config_path is not None and not config_path.exists():
        logger.info("project_config_missing", path=str(config_path))

    token = _project_config_path.set(config_path)
    try:
        return LazyHydrateConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
    finally:
        _project_config_path.reset(token)


def merge_options(options: AsyncOptions, **overrides: Any) -> AsyncOptions:
    """Return a copy of options with overrides applied and validated.

    Args:
        options: Current options.
        **overrides: Field values to replace.

    Returns:
        New AsyncOptions.

    Raises:
        ConfigError: If an override names an unknown field or fails validation.
    """
    unknown = sorted(set(overrides) - set(AsyncOptions.model_fields))
    if unknown:
        raise ConfigError(
            message=f"Unknown option(s): {', '.join(unknown)}",
            field=unknown[0],
            value=overrides[unknown[0]],
        )
    try:
        return AsyncOptions.model_validate({**options.model_dump(), **overrides})
    except ValidationError as e:
        first_error = e.errors()[0]
        raise ConfigError(
            message=f"Invalid option: {first_error['msg']}",
            field=".".join(str(loc) for loc in first_error["loc"]),
            value=first_error.get("input"),
        ) from e
