"""Configuration management for gitproc."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .settings import DEFAULT_MAX_BUFFER, Settings

# Singleton instance
_settings: Optional[Settings] = None

# Default config directory
CONFIG_DIR = Path.home() / ".gitproc"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"

# Top-level YAML keys copied into Settings
_SETTINGS_KEYS = ("git_binary", "max_buffer", "log_level", "use_local_git")


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand ${ENV_VAR} syntax in strings."""
    if isinstance(value, str):
        # Match ${VAR_NAME} pattern
        pattern = r"\$\{([^}]+)\}"
        matches = re.findall(pattern, value)
        for var_name in matches:
            env_value = os.environ.get(var_name, "")
            value = value.replace(f"${{{var_name}}}", env_value)
        return value if value else None
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        content = yaml.safe_load(f)
        return content if content else {}


def _transform_config_to_settings(config: dict) -> dict:
    """Transform YAML config structure to Settings model structure."""
    settings_dict = {}

    # The git section holds the binary location
    git_section = config.get("git") or {}
    if git_section.get("directory"):
        settings_dict["local_git_directory"] = git_section["directory"]
    if git_section.get("exec_path"):
        settings_dict["git_exec_path"] = git_section["exec_path"]

    for key in _SETTINGS_KEYS:
        if config.get(key) is not None:
            settings_dict[key] = config[key]

    return settings_dict


def _env_overrides(settings_dict: dict) -> dict:
    """Drop file values that an environment variable should override."""
    env_names = {
        "use_local_git": ("USE_LOCAL_GIT",),
        "local_git_directory": ("LOCAL_GIT_DIRECTORY",),
        "git_exec_path": ("GIT_EXEC_PATH",),
        "git_binary": ("GITPROC_GIT_BINARY",),
        "max_buffer": ("GITPROC_MAX_BUFFER",),
        "log_level": ("GITPROC_LOG_LEVEL",),
    }
    return {
        key: value
        for key, value in settings_dict.items()
        if not any(name in os.environ for name in env_names.get(key, ()))
    }


def load_settings(config_path: Optional[Path] = None, force_reload: bool = False) -> Settings:
    """
    Load settings with priority: env vars > user config > defaults.

    Args:
        config_path: Optional path to a custom config file
        force_reload: Force reload even if settings are cached

    Returns:
        Settings instance
    """
    global _settings

    if _settings is not None and not force_reload:
        return _settings

    # Load defaults
    defaults = _load_yaml_file(DEFAULTS_FILE)

    # Load user config
    user_config_path = config_path or CONFIG_FILE
    user_config = _load_yaml_file(user_config_path)

    # Merge configs (user overrides defaults)
    merged = _deep_merge(defaults, user_config)

    # Expand environment variables in the merged config
    expanded = _expand_env_vars(merged) or {}

    # Transform to settings structure
    settings_dict = _env_overrides(_transform_config_to_settings(expanded))

    # Create Settings instance (this also reads from environment variables)
    _settings = Settings(**settings_dict)

    return _settings


def get_settings() -> Settings:
    """Get the current settings instance, loading if necessary."""
    if _settings is None:
        return load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None


__all__ = [
    "DEFAULT_MAX_BUFFER",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "CONFIG_DIR",
    "CONFIG_FILE",
]
