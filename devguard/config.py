"""Configuration file support for DevGuard.

Loads .devguard.yml from the project root (or a specified path) and provides
rule thresholds, disabled rules, path exclusions and the inline suppression
keyword.

Config format example:

    disabled_rules:
      - magic-number

    max_params: 4
    max_function_lines: 80

    debug_calls:
      - "console.log"
      - "console.debug"

    exclude_paths:
      - "vendor/"
      - "**/*.test.js"

    suppression_keyword: "devguard-ignore"
"""

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

import yaml

from devguard.rules import (
    DEFAULT_DEBUG_CALLS, DEFAULT_MAX_FUNCTION_LINES, DEFAULT_MAX_PARAMS, RULE_IDS,
)

logger = logging.getLogger(__name__)

CONFIG_NAMES = ('.devguard.yml', '.devguard.yaml')


class ConfigError(Exception):
    """Raised when a config file cannot be read or is not valid YAML."""


@dataclass
class DevGuardConfig:
    """Parsed configuration from .devguard.yml."""
    disabled_rules: List[str] = field(default_factory=list)
    max_params: int = DEFAULT_MAX_PARAMS
    max_function_lines: int = DEFAULT_MAX_FUNCTION_LINES
    debug_calls: List[str] = field(default_factory=lambda: list(DEFAULT_DEBUG_CALLS))
    exclude_paths: List[str] = field(default_factory=list)
    suppression_keyword: str = "devguard-ignore"
    source_path: Optional[str] = None

    def should_exclude(self, file_path: str) -> bool:
        """Check if a file path matches any exclusion pattern."""
        for pattern in self.exclude_paths:
            if fnmatch.fnmatch(file_path, pattern):
                return True
            # Also check if any path component matches
            if pattern.endswith('/') and pattern.rstrip('/') in file_path.split(os.sep):
                return True
        return False


def load_config(target_path: str, config_path: str = None) -> Optional[DevGuardConfig]:
    """Load DevGuard configuration.

    Args:
        target_path: The scan target path (used to find .devguard.yml)
        config_path: Explicit config path (overrides auto-discovery)

    Returns:
        DevGuardConfig if found, None otherwise.
    """
    if config_path:
        if os.path.isfile(config_path):
            return _parse_config(config_path)
        raise ConfigError(f"Config file not found: {config_path}")

    # Walk up from target_path to find .devguard.yml
    search_dir = os.path.abspath(target_path)
    if os.path.isfile(search_dir):
        search_dir = os.path.dirname(search_dir)

    while True:
        for name in CONFIG_NAMES:
            candidate = os.path.join(search_dir, name)
            if os.path.isfile(candidate):
                return _parse_config(candidate)
        parent = os.path.dirname(search_dir)
        if parent == search_dir:
            break  # Reached filesystem root
        search_dir = parent

    return None


def _positive_int(data: dict, key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning("Ignoring invalid %s: %r", key, value)
        return default
    return value


def _string_list(data: dict, key: str) -> Optional[List[str]]:
    items = data.get(key)
    if items is None:
        return None
    if not isinstance(items, list):
        logger.warning("Ignoring %s: expected a list, got %r", key, items)
        return None
    return [str(item) for item in items]


def _parse_config(config_path: str) -> DevGuardConfig:
    """Parse a .devguard.yml file into a DevGuardConfig."""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot load {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")

    config = DevGuardConfig(source_path=config_path)

    disabled = _string_list(data, 'disabled_rules')
    if disabled is not None:
        for rule_id in disabled:
            if rule_id not in RULE_IDS:
                logger.warning("Unknown rule id in %s: %s", config_path, rule_id)
        config.disabled_rules = disabled

    config.max_params = _positive_int(data, 'max_params', DEFAULT_MAX_PARAMS)
    config.max_function_lines = _positive_int(data, 'max_function_lines', DEFAULT_MAX_FUNCTION_LINES)

    debug_calls = _string_list(data, 'debug_calls')
    if debug_calls is not None:
        config.debug_calls = debug_calls

    exclude = _string_list(data, 'exclude_paths')
    if exclude is not None:
        config.exclude_paths = exclude

    config.suppression_keyword = str(data.get('suppression_keyword', 'devguard-ignore'))

    logger.debug("Loaded config from %s", config_path)
    return config
