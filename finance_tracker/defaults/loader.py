"""Configuration loader for seed data and import defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

# Configuration directory
CONFIG_DIR = Path(__file__).parent


def load_config(config_name: str) -> Dict[str, Any]:
    """Read ``<config_name>.json`` from this directory.

    Raises:
        FileNotFoundError: If no such file ships with the package.
    """
    config_path = CONFIG_DIR / f"{config_name}.json"
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_seed_config() -> Dict[str, Any]:
    """Get the starter data used when nothing has been persisted yet."""
    return load_config('seed')


def get_config_value(config_name: str, *keys: str, default: Any = None) -> Any:
    """Nested value at ``keys`` in a config file, or ``default`` when absent."""
    try:
        config = load_config(config_name)
        value = config
        for key in keys:
            value = value[key]
        return value
    except (KeyError, FileNotFoundError):
        return default


def default_categories() -> List[Dict[str, Any]]:
    """Return fresh copies of the starter category records."""
    return [dict(row) for row in get_seed_config()['categories']]


def default_settings() -> Dict[str, Any]:
    """Return the settings used on first run."""
    return dict(get_seed_config()['settings'])


def spreadsheet_default_settings() -> Dict[str, Any]:
    """Return the settings applied when a spreadsheet import carries none."""
    return dict(get_seed_config()['spreadsheet_settings'])


def fallback_color() -> str:
    """Neutral color shown for names that match no category."""
    return get_config_value('seed', 'fallback_color', default='#6B7280')
