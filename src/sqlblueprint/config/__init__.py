"""Configuration module: load and validate resolver settings."""

from typing import Dict, Any, Optional
from ..utils.errors import ConfigError
from ..utils.logging import get_logger
from .manager import load_layered_settings
from .paths import get_defaults_path, get_user_config_path, get_project_config_path

logger = get_logger("config")

REQUIRED_SECTIONS = ["identity", "iam", "insights", "timeouts"]


def load_settings(settings_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load resolver settings.
    
    Args:
        settings_path: Path to a settings YAML file. If None, packaged
            defaults plus user/project overrides are used.
        
    Returns:
        Settings dictionary
        
    Raises:
        ConfigError: If settings cannot be loaded or are incomplete
    """
    settings = load_layered_settings(settings_path)

    missing_sections = [s for s in REQUIRED_SECTIONS if not isinstance(settings.get(s), dict)]
    if missing_sections:
        raise ConfigError(f"Settings missing sections: {missing_sections}")

    validation_issues = []

    identity = settings["identity"]
    for key in ("suffix_bytes", "secret_bytes"):
        value = identity.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            validation_issues.append(f"identity.{key} must be a positive integer")

    iam = settings["iam"]
    if not iam.get("role"):
        validation_issues.append("iam.role is required")
    if not isinstance(iam.get("prefixes"), dict):
        validation_issues.append("iam.prefixes is not a dict")

    if validation_issues:
        raise ConfigError(f"Invalid settings: {'; '.join(validation_issues)}")

    return settings


__all__ = [
    "load_settings",
    "get_defaults_path",
    "get_user_config_path",
    "get_project_config_path",
]
