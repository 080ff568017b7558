"""Typed configuration models for Module Update Router runtime settings."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, ClassVar, Literal
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "module-update-router" / "config.yaml"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False
    service: str = "module-update-router"
    environment: str = "development"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        """Accept lower-case level names from flags and env vars."""
        if isinstance(value, str):
            return value.strip().upper()
        return value


class DatabaseSettings(BaseModel):
    """Relational store connectivity and startup behavior."""

    model_config = ConfigDict(frozen=True)

    driver: Literal["sqlite", "postgresql"] = "sqlite"
    url: str = ""
    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    name: str = "postgres"
    user: str = "postgres"
    password: str = ""
    pool_size: int = Field(default=5, gt=0)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout_seconds: float = Field(default=30.0, gt=0)
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    health_timeout_seconds: float = Field(default=1.0, gt=0)
    reset: bool = False
    seed_path: Path | None = None

    def resolved_url(self) -> str:
        """Return the SQLAlchemy URL, building one from parts when unset."""
        url = self.url.strip()
        if url:
            return url
        if self.driver == "sqlite":
            return "sqlite://"
        return (
            "postgresql+psycopg://"
            f"{quote_plus(self.user)}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{quote_plus(self.name)}"
        )


class HttpSettings(BaseModel):
    """Listener address and API root composition."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    path_prefix: str = "/api"
    app_name: str = "module-update-router"
    api_version: str = "v1"

    def api_roots(self) -> tuple[str, ...]:
        """Return one API root per comma-separated path prefix."""
        roots: list[str] = []
        for prefix in self.path_prefix.split(","):
            prefix = prefix.strip() or "/"
            if not prefix.startswith("/"):
                prefix = f"/{prefix}"
            root = posixpath.join(prefix, self.app_name, self.api_version)
            roots.append(posixpath.normpath(root))
        return tuple(roots)


class RetentionSettings(BaseModel):
    """Event retention sweeper cadence and horizon."""

    model_config = ConfigDict(frozen=True)

    interval_seconds: float = Field(default=3600.0, gt=0)
    max_age_days: int = Field(default=30, gt=0)


class EventBusSettings(BaseModel):
    """Optional event mirroring onto a Redis list."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    url: str = "redis://localhost:6379/0"
    topic: str = Field(default="client-metrics", min_length=1)
    event_buffer: int = Field(default=1000, gt=0)
    connect_timeout_seconds: float = Field(default=5.0, gt=0)
    socket_timeout_seconds: float = Field(default=5.0, gt=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)


class RouterSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml sources."""

    model_config = SettingsConfigDict(
        env_prefix="MUR_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    retention: RetentionSettings = Field(default_factory=RetentionSettings)
    event_bus: EventBusSettings = Field(default_factory=EventBusSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init (CLI flags) > env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )


def load_settings(
    *, config_path: Path | None = None, **overrides: Any
) -> RouterSettings:
    """Build settings once at startup from flags, env and an optional file."""
    if config_path is None:
        return RouterSettings(**overrides)

    class _FileRouterSettings(RouterSettings):
        _config_path: ClassVar[Path] = Path(config_path)

    return _FileRouterSettings(**overrides)
