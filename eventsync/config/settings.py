"""Application settings with Pydantic Settings validation.

Environment variables (and an optional .env file) take precedence.
Non-sensitive configuration is loaded from config/main.yaml and config/*.yaml.
All configs are merged and validated against JSON schemas when present.
"""

import json
from pathlib import Path
from typing import Any, Final, Literal, cast

import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventsync.config.logging_config import get_logger
from eventsync.domain.models import SurfaceConfig
from eventsync.domain.sync_constants import (
    DEFAULT_TREND_LENGTH,
    METRICS_DAYS_DEFAULT,
    METRICS_DAYS_MAX,
    METRICS_DAYS_MIN,
    MIN_TREND_LENGTH,
    SEEN_MARKER_KEY_DEFAULT,
)

API_BASE_URL_DEFAULT: Final[str] = "http://localhost:5000"
API_TIMEOUT_SECONDS_DEFAULT: Final[float] = 10.0
STORAGE_PATH_DEFAULT: Final[str] = "data/client_store.sqlite"

_LIFECYCLE_TITLES: Final[list[str]] = [
    "Activity Starting Soon",
    "Activity Started",
    "Activity Ending Soon",
    "Activity Ended",
    "Activity Evaluation",
]

DEFAULT_SURFACES: Final[dict[str, dict[str, Any]]] = {
    "participant": {
        "interested_titles": [
            "Join request",
            "Join request approved",
            "Activity join",
            "Activity schedule updated",
        ],
        "broadcast_titles": ["New project created", "Project approved"],
        "recipient_field_titles": ["Activity schedule updated"],
    },
    "leader": {
        "interested_titles": ["Join request", "Activity join"],
        "broadcast_titles": ["Project approved"],
    },
    "admin": {
        "broadcast_titles": ["New project created"],
        "suppressed_titles": [
            "Project approved",
            "Activity join",
            "Join request approved",
            "Activity attendance updated",
            *_LIFECYCLE_TITLES,
        ],
    },
}
"""Routing rules per surface, mirroring the web clients."""

logger = cast(Any, get_logger(__name__))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_schema(schema_name: str, config_dir: Path) -> dict[str, Any]:
    """Load JSON Schema from <config_dir>/schemas/.

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = config_dir / "schemas" / f"{schema_name}.schema.json"
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return cast(dict[str, Any], json.load(f))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(
            "config_schema_load_failed",
            schema=schema_name,
            error=str(e),
        )
        return {}


def validate_config_section(
    config: dict[str, Any],
    schema_name: str,
    config_dir: Path,
    file_path: str = "",
) -> None:
    """Validate config section against JSON Schema.

    Raises:
        ValueError: If validation fails
    """
    schema = load_schema(schema_name, config_dir)
    if not schema:
        return

    try:
        validate(instance=config, schema=schema)
        logger.debug("config_validation_succeeded", schema=schema_name)
    except JSONSchemaValidationError as e:
        error_msg = f"Config validation failed for {schema_name}"
        if file_path:
            error_msg += f" (file: {file_path})"
        error_msg += f": {e.message}"
        raise ValueError(error_msg) from e


def load_all_configs(config_dir: Path | str = "config") -> dict[str, Any]:
    """Load and merge all YAML configs from the config directory.

    Loading order (later overrides earlier):
    1. main.yaml
    2. All other *.yaml files (sorted alphabetically)

    Each file is validated against its JSON Schema if available.

    Returns:
        Merged configuration dictionary
    """
    config_path = Path(config_dir)
    merged_config: dict[str, Any] = {}
    if not config_path.is_dir():
        return merged_config

    main_path = config_path / "main.yaml"
    yaml_files = sorted(f for f in config_path.glob("*.yaml") if f.name != "main.yaml")
    if main_path.exists():
        yaml_files.insert(0, main_path)

    for yaml_file in yaml_files:
        schema_name = yaml_file.stem
        try:
            with open(yaml_file, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
            validate_config_section(file_config, schema_name, config_path, str(yaml_file))
        except (yaml.YAMLError, OSError) as e:
            logger.warning(
                "config_file_load_failed",
                path=str(yaml_file),
                error=str(e),
            )
            continue
        except ValueError as e:
            logger.error(
                "config_validation_failed",
                path=str(yaml_file),
                schema=schema_name,
                error=str(e),
            )
            raise

        merged_config = deep_merge(merged_config, file_config)
        logger.debug("config_file_loaded", path=str(yaml_file), schema=schema_name)

    logger.info("config_load_complete", file_count=len(yaml_files))
    return merged_config


class Settings(BaseSettings):
    """Application settings.

    Values come from the environment (prefix EVENTSYNC_) or .env first, then
    from YAML config, then from the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="EVENTSYNC_",
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    log_level: str = Field(default="INFO", description="Logging level")

    api_base_url: str = Field(
        default=API_BASE_URL_DEFAULT, description="REST data provider base URL"
    )
    api_timeout_seconds: float = Field(
        default=API_TIMEOUT_SECONDS_DEFAULT, description="HTTP timeout per request"
    )
    metrics_days: int = Field(
        default=METRICS_DAYS_DEFAULT, description="Days of metric history to fetch"
    )
    trend_length: int = Field(
        default=DEFAULT_TREND_LENGTH, description="Points per placeholder trend series"
    )

    storage_backend: Literal["sqlite", "memory"] = Field(
        default="sqlite", description="Client key-value storage backend"
    )
    storage_path: str = Field(
        default=STORAGE_PATH_DEFAULT, description="SQLite file for the sqlite backend"
    )
    seen_marker_key: str = Field(
        default=SEEN_MARKER_KEY_DEFAULT, description="Storage key of the seen marker"
    )

    surfaces: dict[str, SurfaceConfig] = Field(
        default_factory=lambda: {
            name: SurfaceConfig(name=name, **rules)
            for name, rules in DEFAULT_SURFACES.items()
        },
        description="Routing rules per surface",
    )

    @field_validator("metrics_days")
    @classmethod
    def _clamp_metrics_days(cls, value: int) -> int:
        return max(METRICS_DAYS_MIN, min(METRICS_DAYS_MAX, value))

    @field_validator("trend_length")
    @classmethod
    def _check_trend_length(cls, value: int) -> int:
        if value < MIN_TREND_LENGTH:
            raise ValueError(f"trend_length must be >= {MIN_TREND_LENGTH}")
        return value

    def __init__(self, config_dir: Path | str = "config", **data: Any):
        """Initialize settings with auto-loaded configs from all YAML files."""
        config = load_all_configs(config_dir)

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            setattr(self, field_name, value)

        logging_config = config.get("logging") or {}
        _assign("log_level", logging_config.get("level"))

        api_config = config.get("api") or {}
        _assign("api_base_url", api_config.get("base_url"))
        _assign("api_timeout_seconds", api_config.get("timeout_seconds"))

        dashboard_config = config.get("dashboard") or {}
        _assign("metrics_days", dashboard_config.get("metrics_days"))
        _assign("trend_length", dashboard_config.get("trend_length"))

        storage_config = config.get("storage") or {}
        _assign("storage_backend", storage_config.get("backend"))
        _assign("storage_path", storage_config.get("path"))
        _assign("seen_marker_key", storage_config.get("seen_marker_key"))

        surfaces_config = config.get("surfaces")
        if isinstance(surfaces_config, dict):
            surfaces = dict(self.surfaces)
            for name, rules in surfaces_config.items():
                surfaces[name] = SurfaceConfig(name=name, **(rules or {}))
            _assign("surfaces", surfaces)

    def get_surface(self, name: str) -> SurfaceConfig:
        """Get routing rules for a surface.

        Raises:
            KeyError: If the surface is not configured
        """
        try:
            return self.surfaces[name]
        except KeyError:
            raise KeyError(f"Unknown surface: {name}") from None


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
