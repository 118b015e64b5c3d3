"""Configuration management for Assistant Bridge using Pydantic.

This module provides type-safe configuration models for the source and target
deployments (catalog database and assistant service API), the migration
parameters, performance tuning and logging.

Settings are read from the environment (nested with ``__``, for example
``SOURCE__DB__HOSTNAME`` or ``MIGRATION_TOOL_PARAMETERS__MIGRATE_ALL``) or from a
YAML file with ``${VAR}`` expansion.
"""

import os
import re
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from assistant_migration.client.exceptions import ConfigurationError

ENV_REFERENCE = re.compile(r"\$\{(\w+)\}")


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("Value cannot be empty")
    return value


def _upper(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]
LogLevel = Annotated[
    Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], BeforeValidator(_upper)
]
LogFormat = Annotated[Literal["json", "console"], BeforeValidator(_lower)]


class DatabaseConfig(BaseModel):
    """Connection settings for a workspace catalog database.

    Either ``url`` is given, or the DB2-style connection parts
    (``dbname``, ``hostname``, ``uid``, ``pwd``, ``port``) are.
    """

    url: str | None = Field(default=None, description="Full SQLAlchemy database URL")
    driver: str = Field(default="db2+ibm_db", description="SQLAlchemy dialect+driver name")
    dbname: str | None = Field(default=None, description="Database name")
    hostname: str | None = Field(default=None, description="Database host")
    uid: str | None = Field(default=None, description="Database user")
    pwd: str | None = Field(default=None, description="Database password")
    port: int = Field(default=50000, ge=1, le=65535, description="Database port")
    table_name: str = Field(default="WORKSPACE", min_length=1, description="Catalog table")

    @field_validator("url")
    @classmethod
    def parse_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            make_url(v)
        except ArgumentError as e:
            raise ValueError("Not a valid SQLAlchemy database URL") from e
        return v

    @model_validator(mode="after")
    def validate_connection_parts(self) -> "DatabaseConfig":
        """Require a URL or every connection part."""
        if self.url:
            return self
        missing = [
            name
            for name in ("dbname", "hostname", "uid", "pwd")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValueError(
                f"Database url or connection parts required (missing: {', '.join(missing)})"
            )
        return self

    def sqlalchemy_url(self) -> URL:
        """Build the SQLAlchemy URL for this database."""
        if self.url:
            return make_url(self.url)
        return URL.create(
            drivername=self.driver,
            username=self.uid,
            password=self.pwd,
            host=self.hostname,
            port=self.port,
            database=self.dbname,
        )


class ServiceAPIConfig(BaseModel):
    """Configuration for an assistant service instance (source or target)."""

    url: str = Field(..., description="Service instance URL")
    username: NonBlankStr = Field(default="apikey", description="Basic auth user name")
    password: NonBlankStr = Field(..., description="API key or password")
    version: NonBlankStr = Field(default="2018-07-10", description="API version date")
    verify_ssl: bool = Field(default=True, description="Check the service TLS certificate")
    timeout: int = Field(default=60, ge=1, le=1200, description="Seconds before a call times out")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if v.split("://", 1)[0] not in ("http", "https"):
            raise ValueError("Service URL needs an http or https scheme")
        return v.rstrip("/")


class EnvironmentConfig(BaseModel):
    """One deployment: its catalog and its assistant service."""

    db: DatabaseConfig = Field(..., description="Catalog database")
    service_api: ServiceAPIConfig = Field(..., description="Assistant service API")
    backup_directory: str | None = Field(
        default=None, min_length=1, description="Directory for workspace backups"
    )


class MigrationParametersConfig(BaseModel):
    """Which workspaces to migrate."""

    migrate_all: bool = Field(default=False, description="Migrate every catalog row")
    single_workspace_id: str = Field(default="", description="Workspace to migrate alone")


class PerformanceConfig(BaseModel):
    """Batch concurrency and HTTP pool sizes."""

    max_concurrent: int | None = Field(
        default=None,
        ge=1,
        le=100,
        description="Maximum concurrent workspace operations (unbounded when unset)",
    )
    continue_on_error: bool = Field(
        default=False,
        description="Collect per-workspace failures instead of failing the whole batch",
    )
    http_max_connections: int = Field(
        default=50, ge=1, le=200, description="HTTP pool size per service client"
    )
    http_max_keepalive_connections: int = Field(
        default=20, ge=1, le=100, description="Idle HTTP connections kept per client"
    )


class LoggingConfig(BaseModel):
    """Where log events go and how much of each API call is recorded."""

    level: LogLevel = Field(default="INFO", description="Console log level")
    file_level: LogLevel = Field(default="DEBUG", description="File log level")
    format: LogFormat = Field(default="json", description="Log file format (json or console)")
    file: str | None = Field(default="logs/migration.log", description="Log file, none to disable")
    log_payloads: bool = Field(
        default=False,
        description="Record request and response bodies at DEBUG, secrets redacted",
    )
    max_payload_size: int = Field(
        default=10000, ge=100, le=1000000, description="Body characters kept in a log line"
    )


class MigrationConfig(BaseSettings):
    """Both deployments plus the knobs of one migration run."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    source: EnvironmentConfig = Field(..., description="Source deployment")
    target: EnvironmentConfig = Field(..., description="Target deployment")
    migration_tool_parameters: MigrationParametersConfig = Field(
        default_factory=MigrationParametersConfig, description="Migration parameters"
    )
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def default_backup_directory(self) -> "MigrationConfig":
        """Backups are taken from the source; give them a directory."""
        if self.source.backup_directory is None:
            self.source.backup_directory = "./backup"
        return self


def _format_validation_error(error: ValidationError) -> str:
    """Render a pydantic ValidationError as one line per field."""
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        lines.append(f"{location}: {item['msg']}")
    return "; ".join(lines)


def load_config(config_path: str | Path | None = None, **overrides: Any) -> MigrationConfig:
    """Load and validate configuration.

    Reads the YAML file when given, otherwise the environment.

    Args:
        config_path: Optional path to a YAML configuration file
        **overrides: Top-level fields to set explicitly

    Returns:
        MigrationConfig: Validated configuration

    Raises:
        ConfigurationError: If the configuration is missing or invalid
    """
    try:
        if config_path is not None:
            return load_config_from_yaml(config_path, **overrides)
        return MigrationConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            f"Cannot retrieve a valid configuration: {_format_validation_error(e)}"
        ) from e


def load_config_from_yaml(config_path: str | Path, **overrides: Any) -> MigrationConfig:
    """Read a YAML configuration file, substituting ``${VAR}`` references.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a mapping,
            or references an unset environment variable
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

    if not document:
        raise ConfigurationError(f"Empty configuration file: {path}")
    if not isinstance(document, dict):
        raise ConfigurationError(f"Configuration file {path} must hold a mapping")

    settings = _substitute_env(document)
    settings.update(overrides)
    return MigrationConfig(**settings)


def _substitute_env(node: Any) -> Any:
    """Replace every string that is exactly ``${NAME}`` by the variable's value."""
    if isinstance(node, dict):
        return {key: _substitute_env(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_substitute_env(item) for item in node]
    if not isinstance(node, str):
        return node

    reference = ENV_REFERENCE.fullmatch(node)
    if reference is None:
        return node
    name = reference.group(1)
    if name not in os.environ:
        raise ConfigurationError(
            f"Environment variable '{name}' is referenced by the configuration but not set"
        )
    return os.environ[name]


def redacted_config(config: MigrationConfig) -> dict[str, Any]:
    """Dump configuration with credentials replaced, for display."""
    config_dict = config.model_dump()
    for side in ("source", "target"):
        db = config_dict[side]["db"]
        if db.get("pwd"):
            db["pwd"] = "[REDACTED]"
        if db.get("url"):
            db["url"] = getattr(config, side).db.sqlalchemy_url().render_as_string(
                hide_password=True
            )
        config_dict[side]["service_api"]["password"] = "[REDACTED]"
    return config_dict
