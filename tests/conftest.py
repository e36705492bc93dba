"""Shared fixtures for sqlblueprint tests."""

import pytest
from sqlblueprint.config import load_settings, get_defaults_path
from sqlblueprint.identity.generator import IdentityGenerator


class CountingEntropy:
    """Deterministic entropy source that records how often it was called."""

    def __init__(self):
        self.calls = 0

    def __call__(self, length: int) -> bytes:
        self.calls += 1
        return bytes((self.calls * 16 + i) % 256 for i in range(length))


@pytest.fixture
def settings():
    """Packaged defaults only, ignoring user and project overrides."""
    return load_settings(str(get_defaults_path()))


@pytest.fixture
def entropy():
    return CountingEntropy()


@pytest.fixture
def generator(entropy):
    return IdentityGenerator(entropy=entropy)


@pytest.fixture
def base_config():
    """Minimal valid instance configuration."""
    return {
        "project_id": "my-project",
        "name": "orders-db",
        "database_version": "POSTGRES_15",
    }
