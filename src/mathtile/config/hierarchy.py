"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.mathtile/config.yaml)
  3. Project config   (./mathtile.yaml)
  4. Environment variables (PORT, MATHTILE_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from mathtile.config.defaults import get_defaults
from mathtile.types import ServiceConfig

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".mathtile" / "config.yaml"
_PROJECT_CONFIG_NAME = "mathtile.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "PORT": "port",
    "MATHTILE_HOST": "host",
    "MATHTILE_PORT": "port",
    "MATHTILE_CACHE_CAPACITY": "cache_capacity",
    "MATHTILE_CACHE_TTL_SECONDS": "cache_ttl_seconds",
    "MATHTILE_MAX_TILE_SIZE": "max_tile_size",
    "MATHTILE_MAX_ATTEMPTS": "max_attempts",
    "MATHTILE_RETRY_BASE_DELAY": "retry_base_delay",
    "MATHTILE_ATTEMPT_TIMEOUT": "attempt_timeout",
    "MATHTILE_DEFAULT_FONT_SIZE": "default_font_size",
    "MATHTILE_DEFAULT_PIXEL_DENSITY": "default_pixel_density",
    "MATHTILE_MAX_PIXELS": "max_pixels",
    "MATHTILE_TEXT_COLOR": "text_color",
    "MATHTILE_MAX_BODY_BYTES": "max_body_bytes",
    "MATHTILE_CORS_ORIGINS": "cors_origins",
    "MATHTILE_MAX_CONCURRENT_RENDERS": "max_concurrent_renders",
    "MATHTILE_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "port": int,
    "cache_capacity": int,
    "cache_ttl_seconds": float,
    "max_tile_size": int,
    "max_attempts": int,
    "retry_base_delay": float,
    "attempt_timeout": float,
    "default_font_size": float,
    "default_pixel_density": float,
    "max_pixels": int,
    "max_body_bytes": int,
    "max_concurrent_renders": int,
}

# Comma-separated list values
_LIST_KEYS = {"cors_origins"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    env_cfg = _load_env_vars()
    config.update(env_cfg)

    # Layer 5: Runtime arguments (highest priority)
    # Filter out None values; only override when explicitly set
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def load_service_config(**runtime_overrides: Any) -> ServiceConfig:
    """Resolve the hierarchy and validate it into a ServiceConfig."""
    return ServiceConfig(**load_config_hierarchy(**runtime_overrides))


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists."""
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            return data
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _find_project_config() -> Path | None:
    """Search for mathtile.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read PORT and MATHTILE_* environment variables.

    MATHTILE_PORT is listed after PORT so it wins when both are set.
    """
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key in _LIST_KEYS:
        return [item.strip() for item in value.split(",") if item.strip()]

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
