"""Configuration loader module.

This module provides functions for loading configuration from a YAML file and
``STARMAP_*`` environment variables and turning it into a validated
StarmapConfig object. Precedence: defaults < file < environment.
"""

from typing import Any, Dict, List, Optional
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from .schema import StarmapConfig
from .exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path("~/.starmap/config.yaml")

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
_SECTIONS = ("sync", "modelsdev", "logging")


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with values that override the base

    Returns:
        Merged dictionary where override values take precedence
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def _substitute(value: str) -> str:
    return _ENV_PATTERN.sub(lambda match: os.environ.get(match.group(1), ""), value)


def resolve_env_vars(config: Any) -> Any:
    """Replace ${VAR} patterns with environment variables.

    Dictionaries and lists are walked recursively; unset variables resolve
    to an empty string.
    """
    if isinstance(config, dict):
        return {key: resolve_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [resolve_env_vars(item) for item in config]
    if isinstance(config, str) and "${" in config:
        return _substitute(config)
    return config


def load_yaml_file(path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary containing configuration from YAML

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", context={"path": str(path)}) from e
    except OSError as e:
        raise ConfigError(f"Error reading {path}: {e}", context={"path": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping", context={"path": str(path)})
    return data


def _normalize_env_key(env_key: str) -> Optional[List[str]]:
    """Map ``SYNC_TIMEOUT_SECONDS`` to ``["sync", "timeout_seconds"]``.

    Returns None for keys outside the known sections.
    """
    section, _, rest = env_key.lower().partition("_")
    if section not in _SECTIONS or not rest:
        return None
    return [section, rest]


def _coerce(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit():
        return float(value)
    return value


def load_from_env(prefix: str = "STARMAP") -> Dict[str, Any]:
    """Load configuration from environment variables with given prefix.

    Args:
        prefix: Prefix for environment variables to consider

    Returns:
        Dictionary containing configuration from environment
    """
    result: Dict[str, Any] = {}
    prefix_upper = f"{prefix.upper()}_"

    for key, value in os.environ.items():
        if not key.startswith(prefix_upper):
            continue
        path = _normalize_env_key(key[len(prefix_upper):])
        if path is None:
            continue

        current = result
        for part in path[:-1]:
            current = current.setdefault(part, {})
        current[path[-1]] = _coerce(value)

    return result


def load_config(file_path: Optional[str] = None, env_prefix: str = "STARMAP") -> StarmapConfig:
    """Load StarmapConfig from file and environment.

    Args:
        file_path: Path to config file (defaults to $STARMAP_CONFIG or
            ~/.starmap/config.yaml)
        env_prefix: Prefix for environment variables

    Returns:
        Validated StarmapConfig instance

    Raises:
        ConfigError: On loading or validation failure
    """
    path = Path(
        file_path or os.environ.get(f"{env_prefix}_CONFIG") or DEFAULT_CONFIG_PATH
    ).expanduser()

    config_data: Dict[str, Any] = {}
    if path.exists():
        config_data = merge_dicts(config_data, load_yaml_file(str(path)))

    env_config = load_from_env(env_prefix)
    if env_config:
        config_data = merge_dicts(config_data, env_config)

    config_data = resolve_env_vars(config_data)

    try:
        return StarmapConfig.model_validate(config_data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", context={"path": str(path)}) from e
