"""Configuration path handling for the model discovery registry.

This module implements path resolution for the config file and the discovery
cache following the XDG Base Directory Specification, with environment
variable overrides.
"""

import os
from pathlib import Path
from typing import List, Optional

import platformdirs

# Application name used for directory paths
APP_NAME = "model-discovery-registry"

# Environment variable names
ENV_CACHE_DIR = "MDR_CACHE_DIR"
ENV_CACHE_TTL = "MDR_CACHE_TTL"
ENV_CONFIG_PATH = "MDR_CONFIG_PATH"

# Default filenames
CONFIG_FILENAME = "config.yaml"
PROJECT_CONFIG_FILENAME = "mdr.yaml"


def get_user_config_dir() -> Path:
    """Get the path to the user's config directory for this application."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_user_cache_dir() -> Path:
    """Get the path to the user's cache directory for this application."""
    return Path(platformdirs.user_cache_dir(APP_NAME))


def get_cache_dir() -> Path:
    """Get the discovery cache directory.

    Returns:
        The directory named by ``MDR_CACHE_DIR`` when set, otherwise the
        platform user cache directory
    """
    env_dir = os.environ.get(ENV_CACHE_DIR)
    if env_dir:
        return Path(env_dir).expanduser()
    return get_user_cache_dir()


def ensure_dir_exists(directory: Path) -> None:
    """Ensure that a directory exists and is writable.

    Args:
        directory: Directory to create

    Raises:
        OSError: If the directory cannot be created due to permission errors or other IO issues
        PermissionError: If the directory exists but is not writable
    """
    if directory.exists():
        if not os.access(directory, os.W_OK):
            raise PermissionError(f"Directory exists but is not writable: {directory}")
        return

    os.makedirs(directory, exist_ok=True)

    if not os.access(directory, os.W_OK):
        raise PermissionError(f"Created directory but it is not writable: {directory}")


def get_user_config_path() -> Path:
    """Get the path to the user config file, respecting ``MDR_CONFIG_PATH``."""
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path).expanduser()
    return get_user_config_dir() / CONFIG_FILENAME


def get_project_config_path(cwd: Optional[Path] = None) -> Path:
    """Get the path to the project-local config file.

    Args:
        cwd: Directory to look in, defaults to the current working directory
    """
    return (cwd or Path.cwd()) / PROJECT_CONFIG_FILENAME


def get_config_search_paths(cwd: Optional[Path] = None) -> List[Path]:
    """Get config file candidates, lowest precedence first.

    Args:
        cwd: Directory holding the project-local config file

    Returns:
        Candidate paths; callers skip the ones that do not exist
    """
    return [get_user_config_path(), get_project_config_path(cwd)]
