"""Two-tier settings manager (packaged defaults, user, project override)."""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from .paths import get_defaults_path, get_user_config_path, get_project_config_path
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("config.manager")


def read_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML settings file that must hold a mapping."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Error reading settings file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a dictionary")
    return data


def load_layered_settings(settings_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load packaged defaults and merge overrides on top.

    Args:
        settings_path: Explicit settings file. When given it replaces the
            user and project tiers.

    Returns:
        Merged settings dictionary
    """
    settings = read_yaml(get_defaults_path())

    if settings_path is not None:
        path = Path(settings_path)
        if not path.exists():
            raise ConfigError(f"Settings file not found: {settings_path}")
        _deep_merge(settings, read_yaml(path))
        logger.info(f"Loaded settings from {settings_path}")
        return settings

    user_config_path = get_user_config_path()
    if user_config_path.exists():
        try:
            _deep_merge(settings, read_yaml(user_config_path))
            logger.info(f"Loaded user settings from {user_config_path}")
        except ConfigError as e:
            logger.warning(f"Could not load user settings from {user_config_path}: {e}")

    project_config_path = get_project_config_path()
    if project_config_path:
        try:
            _deep_merge(settings, read_yaml(project_config_path))
            logger.info(f"Loaded project settings from {project_config_path}")
        except ConfigError as e:
            logger.warning(f"Could not load project settings from {project_config_path}: {e}")

    return settings


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
