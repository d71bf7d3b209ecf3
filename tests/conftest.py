"""Shared pytest fixtures for netkit tests."""

import pytest

from netkit.config_manager import ConfigManager
from netkit.models import Endpoint, HTTPMethod
from netkit.token_store import TokenStore


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Provide a temporary directory for settings files."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def config(tmp_config_dir):
    """Provide a loaded ConfigManager backed by a temporary file."""
    manager = ConfigManager(tmp_config_dir / "settings.json")
    manager.load()
    return manager


@pytest.fixture
def token_store(config):
    """Provide a TokenStore persisted in the temporary settings."""
    return TokenStore(config)


@pytest.fixture
def base_url():
    """Provide a consistent base URL."""
    return "http://api.test"


@pytest.fixture
def users_endpoint():
    """Provide a sample GET endpoint."""
    return Endpoint(path="/users", method=HTTPMethod.GET)


@pytest.fixture
def data_dir_env(monkeypatch, tmp_path):
    """Point the settings directory at a temporary path."""
    data_dir = tmp_path / "netkit-data"
    monkeypatch.setenv("NETKIT_DATA_DIR", str(data_dir))
    return data_dir
