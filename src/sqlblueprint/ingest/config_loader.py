"""Load and validate instance configuration files (YAML or JSON)."""

import json
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from pydantic import ValidationError
from .models import InstanceConfig
from ..contracts.descriptors import GeneratedIdentities
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("ingest.config_loader")


def _read_mapping(path: Path) -> Dict[str, Any]:
    """Parse a YAML or JSON file into a dictionary."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    except OSError as e:
        raise ConfigError(
            f"Error reading {path}: {e}. "
            "Please check file permissions and try again."
        )

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def parse_instance_config(data: Dict[str, Any]) -> InstanceConfig:
    """
    Validate a raw configuration mapping.

    Args:
        data: Configuration mapping (variable name -> value)

    Returns:
        Validated InstanceConfig

    Raises:
        ConfigError: If required values are missing or have the wrong type
    """
    try:
        return InstanceConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid instance configuration: {e}")


def load_instance_config(config_path: str) -> InstanceConfig:
    """
    Load and validate an instance configuration file.

    Args:
        config_path: Path to a .yaml/.yml or .json file

    Returns:
        Validated InstanceConfig

    Raises:
        ConfigError: If file cannot be loaded or is invalid
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}. "
            "Please check the file path and ensure the file exists."
        )

    if not path.is_file():
        raise ConfigError(f"Path is not a file: {config_path}")

    config = parse_instance_config(_read_mapping(path))
    logger.info(
        f"Loaded instance configuration from {config_path} "
        f"(name: {config.name}, version: {config.database_version})"
    )
    return config


def load_generated_identities(state_path: str) -> Optional[GeneratedIdentities]:
    """Load identities persisted by an earlier pass; None when the file does not exist yet."""
    path = Path(state_path)
    if not path.exists():
        logger.debug(f"No identity state at {state_path}, starting fresh")
        return None

    try:
        return GeneratedIdentities(**_read_mapping(path))
    except ValidationError as e:
        raise ConfigError(f"Invalid identity state in {state_path}: {e}")


def save_generated_identities(identities: GeneratedIdentities, state_path: str) -> None:
    """Persist generated identities as JSON."""
    path = Path(state_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(identities.model_dump(), f, indent=2)
        logger.info(f"Saved generated identities to {state_path}")
    except OSError as e:
        raise ConfigError(f"Failed to save identity state to {state_path}: {e}")
