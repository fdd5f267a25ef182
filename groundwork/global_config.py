"""Global configuration management for groundwork.

Handles user-level configuration stored in ~/.groundwork/config.yaml
(or $GROUNDWORK_HOME/config.yaml):
- package_manager: auto, npm, pnpm, yarn or bun
- install_packages: Whether setup and upgrade run the package manager
"""

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from groundwork.exceptions import ConfigError
from groundwork.packages.manager import PACKAGE_MANAGERS


DEFAULT_CONFIG: Dict[str, Any] = {
    "package_manager": "auto",
    "install_packages": True,
}

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def get_global_config_dir() -> Path:
    """Get the global groundwork configuration directory.

    Returns:
        $GROUNDWORK_HOME if set, otherwise ~/.groundwork/
    """
    override = os.environ.get("GROUNDWORK_HOME")
    if override:
        return Path(override)
    return Path.home() / ".groundwork"


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to the config directory.
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file."""
    return get_global_config_dir() / "config.yaml"


def load_global_config() -> Dict[str, Any]:
    """Load global configuration.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Failed to save config to {config_file}: {e}")


def get_effective_config() -> Dict[str, Any]:
    """Get the configuration with defaults filled in for missing keys."""
    return {**DEFAULT_CONFIG, **load_global_config()}


def get_package_manager() -> str:
    """Get the configured package manager ("auto" when not set)."""
    return get_effective_config()["package_manager"]


def get_install_packages() -> bool:
    """Get whether setup and upgrade should install packages."""
    return bool(get_effective_config()["install_packages"])


def _parse_value(key: str, value: str) -> Any:
    if key == "package_manager":
        if value != "auto" and value not in PACKAGE_MANAGERS:
            choices = ", ".join(["auto", *PACKAGE_MANAGERS])
            raise ConfigError(f"Invalid package_manager '{value}'. Choose one of: {choices}")
        return value

    if key == "install_packages":
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError(f"Invalid install_packages '{value}'. Use true or false")

    raise ConfigError(f"Unknown config key '{key}'. Known keys: {', '.join(DEFAULT_CONFIG)}")


def set_config_value(key: str, value: str) -> Any:
    """Validate and store a config value given as a string.

    Args:
        key: Config key (package_manager or install_packages).
        value: Value as typed on the command line.

    Returns:
        The parsed value that was stored.

    Raises:
        ConfigError: If the key is unknown or the value invalid.
    """
    parsed = _parse_value(key, value)
    config = load_global_config()
    config[key] = parsed
    save_global_config(config)
    return parsed


def is_configured() -> bool:
    """Check if a config file exists."""
    return get_config_file_path().exists()
