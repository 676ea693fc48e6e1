"""Configuration management for Vivarium."""

import os
from pathlib import Path

import platformdirs

STATE_FILE_NAME = "state.json"
COMPOSE_FILE_NAME = "compose.yaml"
ENV_FILE_NAME = ".env"
LOCK_FILE_NAME = ".lock"


def get_registry_dir() -> Path:
    """Get the registry root directory.

    Honors VIVARIUM_HOME when set. The directory is not created here;
    the registry creates it on first write.

    Returns:
        Path to registry directory
    """
    override = os.getenv("VIVARIUM_HOME")
    if override:
        return Path(override).expanduser()
    return Path(platformdirs.user_data_dir("vivarium", "vivarium"))
