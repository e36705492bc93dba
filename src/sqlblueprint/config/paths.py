"""Settings path resolution for the two-tier override system."""

from pathlib import Path
from typing import Optional


def get_defaults_path() -> Path:
    """Packaged defaults shipped with sqlblueprint."""
    return Path(__file__).parent / "defaults.yaml"


def get_user_config_path() -> Path:
    """Get user settings path: ~/.sqlblueprint/config.yaml"""
    return Path.home() / ".sqlblueprint" / "config.yaml"


def get_project_config_path() -> Optional[Path]:
    """Get project settings path: .sqlblueprint/config.yaml (from current working directory)"""
    project_config = Path.cwd() / ".sqlblueprint" / "config.yaml"
    if project_config.exists():
        return project_config
    return None
