"""
Configuration loader for turnip_calc.

This module provides Pydantic models for the few tunables around the phase
tree engine and a loader function that merges a YAML configuration file with
environment variables.

Design Principles:
- Strict Schema: All settings are defined in Pydantic models so bounds and
  tolerances are validated before a run starts.
- Environment Overrides: Any setting can be overridden by an environment
  variable following the nested structure, e.g. `engine.ratio_epsilon` is
  overridden by `TURNIP_CALC_ENGINE__RATIO_EPSILON`.
- Immutable: The `Settings` object is frozen. The pattern chains themselves
  are fixed module constants and are deliberately not configurable here.
- Clear Errors: Pydantic `ValidationError`s are wrapped in `ConfigError`.
"""

import os
import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

# --- Custom Exceptions ---

class ConfigError(Exception):
    """Custom exception for configuration-related errors."""
    pass

# --- Pydantic Models for Configuration Sections ---

class EngineSettings(BaseModel):
    """Bounds and tolerances applied by the phase tree engine."""
    model_config = ConfigDict(frozen=True)

    min_base_price: int = Field(90, gt=0)
    max_base_price: int = Field(110, gt=0)
    # Twelve half-day sell slots per week; the chains cannot consume more.
    max_observations: int = Field(12, ge=1, le=12)
    # Slack when matching a price-implied ratio against a phase interval.
    ratio_epsilon: float = Field(1e-4, gt=0, lt=0.01)

    @model_validator(mode="after")
    def max_base_price_not_below_min(self):
        if self.max_base_price < self.min_base_price:
            raise PydanticCustomError(
                "base_price_bounds_invalid",
                "max_base_price ({max_base_price}) must not be below min_base_price ({min_base_price})",
                {"max_base_price": self.max_base_price, "min_base_price": self.min_base_price}
            )
        return self

class LoggingSettings(BaseModel):
    """Log sink configuration used by the CLI."""
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    # Dump every live phase after each step (very verbose).
    debug_dumps: bool = False
    log_file: Optional[str] = None

    @field_validator('level')
    def level_must_be_known(cls, v):
        level = v.upper()
        if level not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            raise PydanticCustomError(
                "log_level_invalid",
                "Unknown log level '{level}'",
                {"level": v}
            )
        return level

class Settings(BaseModel):
    """The root Pydantic model for the entire configuration."""
    model_config = ConfigDict(frozen=True)

    engine: EngineSettings = EngineSettings()
    logging: LoggingSettings = LoggingSettings()


DEFAULT_SETTINGS = Settings()

# --- Helper Functions ---

def _load_config_from_yaml(path: Path) -> Dict[str, Any]:
    """Loads the YAML configuration file."""
    if not path.is_file():
        raise ConfigError(f"Configuration file not found at: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file at {path}: {e}") from e

def _get_env_overrides(prefix: str = "TURNIP_CALC") -> Dict[str, Any]:
    """
    Parses environment variables and converts them into a nested dict.
    e.g., TURNIP_CALC_ENGINE__MAX_BASE_PRICE becomes
    {'engine': {'max_base_price': '...'}}
    """
    overrides: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if key.startswith(prefix + "_"):
            parts = key.removeprefix(prefix).strip("_").lower().split("__")

            # JSON-looking values (numbers, booleans, lists) are decoded;
            # everything else is left to pydantic's coercion.
            if (value.startswith('[') and value.endswith(']')) or \
               value.lower() in ['true', 'false', 'null'] or \
               value.replace('.', '', 1).isdigit():
                try:
                    parsed_value = json.loads(value.lower() if value.lower() in ['true', 'false', 'null'] else value)
                except json.JSONDecodeError:
                    parsed_value = value
            else:
                parsed_value = value

            d = overrides
            for part in parts[:-1]:
                d = d.setdefault(part, {})
            d[parts[-1]] = parsed_value
    return overrides

def _merge_configs(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges the override dict into the base dict.
    """
    for key, value in overrides.items():
        if isinstance(value, dict) and key in base and isinstance(base[key], dict):
            base[key] = _merge_configs(base[key], value)
        else:
            base[key] = value
    return base

# --- Public API ---

def load_settings(path: Optional[str] = None) -> Settings:
    """
    Loads, validates, and returns the application settings.

    1. Loads the base configuration from the YAML file, if a path is given.
       Without a path every setting starts from its default.
    2. Scans environment variables for overrides (prefixed with "TURNIP_CALC_").
    3. Merges the environment overrides into the base configuration.
    4. Validates the final configuration against the `Settings` model.

    Raises:
        ConfigError: If the file is not found, cannot be parsed, or if
                     validation fails.
    """
    if path is not None:
        logger.info(f"Loading settings from '{path}'...")
        yaml_config = _load_config_from_yaml(Path(path))
        if yaml_config is None:
            yaml_config = {}
        if not isinstance(yaml_config, dict):
            raise ConfigError(f"YAML file '{path}' must contain a mapping at the top level.")
    else:
        yaml_config = {}

    env_overrides = _get_env_overrides()
    final_config = _merge_configs(yaml_config, env_overrides)

    try:
        settings = Settings.model_validate(final_config)
        logger.debug("Settings loaded and validated successfully.")
        return settings
    except ValidationError as e:
        error_details = e.errors()
        error_msg = f"Configuration validation failed with {len(error_details)} error(s):\n"
        for error in error_details:
            loc = " -> ".join(map(str, error['loc'])) if error['loc'] else "root"
            error_msg += f"  - Location: {loc}\n    Message: {error['msg']}\n"

        logger.error(error_msg)
        raise ConfigError("Failed to validate settings.") from e
