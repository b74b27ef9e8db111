"""Configuration management for bundlecop.

Settings come from three places, besides the command line:
- the environment, as ``BUNDLECOP_*`` variables
- a project config file, ``bundlecop.yml`` in the working directory
- the user config file, ``~/.bundlecop/config.json``
"""

import os
import json
from typing import Any, Dict, Mapping, Optional

import yaml


CONFIG_DIR = os.path.expanduser("~/.bundlecop")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

PROJECT_CONFIG_FILE = "bundlecop.yml"

# Keys that may be set in either config file
CONFIG_KEYS = ("api_url", "project_key", "bundleset", "include", "exclude")

ENV_PREFIX = "BUNDLECOP_"
ENV_MAPPING = {
    "projectKey": "BUNDLECOP_KEY",
}


def ensure_config_exists():
    """Ensure the configuration directory and file exist."""
    config_dir = os.path.dirname(CONFIG_FILE)
    if not os.path.exists(config_dir):
        os.makedirs(config_dir)

    if not os.path.exists(CONFIG_FILE):
        with open(CONFIG_FILE, "w") as f:
            json.dump({}, f)


def get_config():
    """Get the current user configuration.

    Returns:
        dict: Current configuration, empty if there is no config file yet.
    """
    if not os.path.exists(CONFIG_FILE):
        return {}
    with open(CONFIG_FILE, "r") as f:
        return json.load(f)


def update_config(updates):
    """Update the user configuration with new values.

    Args:
        updates (dict): Dictionary of configuration values to update.

    Raises:
        ValueError: If a key is not a known configuration key.
    """
    unknown = [key for key in updates if key not in CONFIG_KEYS]
    if unknown:
        raise ValueError(
            f"Unknown configuration key(s): {', '.join(unknown)}. "
            f"Valid keys are: {', '.join(CONFIG_KEYS)}"
        )

    ensure_config_exists()
    config = get_config()
    config.update(updates)

    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)


def load_project_config(path: str = PROJECT_CONFIG_FILE) -> Dict[str, Any]:
    """Load the project configuration file.

    Args:
        path (str): Path of the project config file.

    Returns:
        Dict[str, Any]: The configuration, empty if the file does not exist.

    Raises:
        ValueError: If the file does not contain a mapping.
    """
    if not os.path.exists(path):
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of settings")
    return data


def env_key(name: str) -> str:
    """Environment variable to read the option ``name`` from."""
    return ENV_MAPPING.get(name, f"{ENV_PREFIX}{name.upper()}")


def read_option(name: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Read an option from the environment; empty values count as unset."""
    if env is None:
        env = os.environ
    return env.get(env_key(name)) or None


def as_bool(value: Optional[str]) -> bool:
    """Interpret an environment string as a flag."""
    if not value or value.lower() == "false" or value == "0":
        return False
    return True
