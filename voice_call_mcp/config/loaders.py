"""
Configuration file loaders and path resolution.

This module handles:
- .env loading (python-dotenv)
- Path resolution (relative to absolute)
- YAML file loading with environment variable expansion
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from voice_call_mcp.errors import ConfigurationError


# Project root directory (parent of voice_call_mcp/)
_PROJ_DIR = Path(__file__).parent.parent.parent.resolve()

DEFAULT_CONFIG_PATH = "config/voice-call.yaml"


def load_env_file(path: Optional[str] = None) -> bool:
    """
    Load a .env file into the process environment.

    Variables already present in the environment are never overridden.

    Returns:
        True if a file was found and loaded
    """
    if path is None:
        path = os.getenv("VOICE_CALL_ENV_FILE") or os.path.join(os.getcwd(), ".env")
    return load_dotenv(path, override=False)


def resolve_config_path(path: str) -> str:
    """
    Resolve configuration file path to absolute path.

    If the provided path is not absolute, it is resolved relative to the project root.
    """
    if not os.path.isabs(path):
        return os.path.join(_PROJ_DIR, path)
    return path


def load_yaml_with_env_expansion(path: str) -> dict:
    """
    Load YAML file with environment variable expansion.

    Reads the YAML file, expands ${VAR} and $VAR environment variable references,
    then parses the YAML content.

    Raises:
        ConfigurationError: If the file doesn't exist, can't be parsed, or
            doesn't contain a mapping
    """
    try:
        with open(path, 'r') as f:
            config_str = f.read()
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found at: {path}")

    try:
        config_data = yaml.safe_load(os.path.expandvars(config_str))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML configuration: {e}") from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return config_data


def load_optional_yaml(path: Optional[str] = None) -> dict:
    """
    Load the YAML configuration if there is one.

    An explicit path (argument or VOICE_CALL_CONFIG) must exist; the default
    path is optional and yields an empty mapping when absent.
    """
    explicit = path or os.getenv("VOICE_CALL_CONFIG")
    resolved = resolve_config_path(explicit or DEFAULT_CONFIG_PATH)
    if not explicit and not os.path.exists(resolved):
        return {}
    return load_yaml_with_env_expansion(resolved)
