"""Seed data and import defaults.

Configuration is stored in JSON files in this directory so the starter
categories and default settings can be changed without code changes.
"""

from .loader import (
    load_config,
    get_config_value,
    get_seed_config,
    default_categories,
    default_settings,
    spreadsheet_default_settings,
    fallback_color,
)

__all__ = [
    'load_config',
    'get_config_value',
    'get_seed_config',
    'default_categories',
    'default_settings',
    'spreadsheet_default_settings',
    'fallback_color',
]
