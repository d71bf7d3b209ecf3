"""Path utilities for locating the local settings storage."""

import os
import sys
from pathlib import Path

from .constants import DATA_DIR_ENV_VAR, SETTINGS_FILE_NAME


def get_data_dir() -> Path:
    """Get the user data directory for persisted settings.

    Resolution order:
    - the directory named by the ``NETKIT_DATA_DIR`` environment variable
    - the platform's per-user application data directory
    """
    override = os.environ.get(DATA_DIR_ENV_VAR)
    if override:
        data_dir = Path(override)
    elif sys.platform == 'darwin':
        data_dir = Path.home() / 'Library' / 'Application Support' / 'netkit'
    elif sys.platform == 'win32':
        data_dir = Path.home() / 'AppData' / 'Local' / 'netkit'
    else:
        data_dir = Path.home() / '.config' / 'netkit'

    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_settings_path() -> Path:
    """Get the settings file path."""
    return get_data_dir() / SETTINGS_FILE_NAME
