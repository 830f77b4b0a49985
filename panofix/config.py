"""Configuration management for panofix.

Settings are resolved with the following precedence (highest to lowest):
1. CLI argument
2. Environment variable (PANOFIX_<KEY>)
3. Project config file (``.panofix/config.yaml`` under the project root)
4. Built-in default

Usage:
    from panofix.config import get_setting, resolve_int_setting, set_setting

    # Raw value with full precedence resolution
    output_dir = get_setting("output_dir", cli_value=cli_output_dir, root=root)

    # Integer setting, validated and defaulted
    window = resolve_int_setting("read_window", root=root)

    # Persist a project-level setting
    set_setting(root, "max_workers", 4)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from panofix.constants import DEFAULT_MAX_WORKERS, DEFAULT_READ_WINDOW
from panofix.errors import InvalidSettingError

# Built-in defaults; unknown keys may still be stored in the file
DEFAULTS: dict[str, Any] = {
    "read_window": DEFAULT_READ_WINDOW,
    "max_workers": DEFAULT_MAX_WORKERS,
    "output_dir": None,
}

KNOWN_SETTINGS: frozenset[str] = frozenset(DEFAULTS)

# Integer settings and their smallest accepted value
_INT_MINIMUMS: dict[str, int] = {
    # SOI plus one marker and length field
    "read_window": 6,
    "max_workers": 1,
}

CONFIG_DIRNAME = ".panofix"
CONFIG_FILENAME = "config.yaml"


def get_config_path(root: Path) -> Path:
    """Get the path to the config file of a project root.

    Returns:
        Path to .panofix/config.yaml
    """
    return root / CONFIG_DIRNAME / CONFIG_FILENAME


def load_config(root: Path) -> dict[str, Any]:
    """Load configuration from .panofix/config.yaml.

    Returns:
        Config dictionary. Returns empty dict if the file doesn't exist or
        is empty.

    Raises:
        ConfigError: If the file does not hold a YAML mapping.
    """
    config_file = get_config_path(root)

    if not config_file.exists():
        return {}

    content = config_file.read_text()
    if not content.strip():
        return {}

    data = yaml.safe_load(content)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidSettingError(str(config_file), type(data).__name__, "expected a mapping")
    return data


def save_config(root: Path, config: dict[str, Any]) -> None:
    """Save configuration to .panofix/config.yaml.

    Creates the .panofix directory if it doesn't exist.
    """
    config_file = get_config_path(root)
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=False))


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to its environment variable (PANOFIX_<KEY>)."""
    return f"PANOFIX_{key.upper()}"


def get_setting(
    key: str,
    cli_value: Any | None = None,
    root: Path | None = None,
) -> Any | None:
    """Resolve a setting with full precedence.

    Args:
        key: Setting key (e.g., "read_window")
        cli_value: Value passed via CLI argument (highest precedence)
        root: Project root for loading the config file

    Returns:
        Resolved value, or the built-in default (None for unknown keys).
    """
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(_get_env_var_name(key))
    if env_value is not None:
        return env_value

    if root is not None:
        config = load_config(root)
        if key in config:
            return config[key]

    return DEFAULTS.get(key)


def resolve_int_setting(
    key: str,
    cli_value: int | None = None,
    root: Path | None = None,
) -> int:
    """Resolve an integer setting and validate it.

    Environment variables and YAML may deliver strings; those are coerced.

    Raises:
        InvalidSettingError: If the value is not an integer or is below
            the setting's minimum.
    """
    value = get_setting(key, cli_value=cli_value, root=root)
    if isinstance(value, bool):
        raise InvalidSettingError(key, value, "expected an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidSettingError(key, value, "expected an integer") from None

    minimum = _INT_MINIMUMS.get(key)
    if minimum is not None and number < minimum:
        raise InvalidSettingError(key, value, f"must be at least {minimum}")
    return number


def set_setting(root: Path, key: str, value: Any) -> None:
    """Set a project-level configuration value.

    Integer settings are validated before they are written.
    """
    if key in _INT_MINIMUMS:
        value = resolve_int_setting(key, cli_value=value)

    config = load_config(root)
    config[key] = value
    save_config(root, config)


def unset_setting(root: Path, key: str) -> bool:
    """Remove a configuration value.

    Returns:
        True if the key existed and was removed, False otherwise.
    """
    config = load_config(root)
    if key not in config:
        return False
    del config[key]
    save_config(root, config)
    return True


def list_settings(root: Path | None = None) -> dict[str, dict[str, Any]]:
    """List all settings with their resolved values and sources.

    Returns:
        Dict mapping setting keys to {"value": ..., "source": ...}, where
        source is "env", "config" or "default".
    """
    config = load_config(root) if root is not None else {}
    keys = sorted(KNOWN_SETTINGS | set(config))

    result: dict[str, dict[str, Any]] = {}
    for key in keys:
        result[key] = {
            "value": get_setting(key, root=root),
            "source": _get_setting_source(key, config),
        }
    return result


def _get_setting_source(key: str, config: dict[str, Any]) -> str:
    if _get_env_var_name(key) in os.environ:
        return "env"
    if key in config:
        return "config"
    return "default"
