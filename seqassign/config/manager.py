#!/usr/bin/env python3
"""
Layered configuration for seqassign.

Values are resolved, lowest precedence first, from:

    1. DEFAULT_CONFIG
    2. the configuration file given on the command line (YAML, or JSON by extension)
    3. its local companion, <name>.local.<ext>, when present
    4. SEQASSIGN_<SECTION>__<KEY> environment variables

Schema violations are collected in ``errors`` rather than raised, so that a
pipeline can decide whether to refuse the configuration.
"""
import os
import copy
import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .schema import ConfigSchema
from .defaults import DEFAULT_CONFIG
from ..exceptions import ConfigurationError

logger = logging.getLogger("seqassign.config")

TRUE_WORDS = ('true', 'yes', 'on')
FALSE_WORDS = ('false', 'no', 'off')


def local_config_path(config_path: str) -> str:
    """Companion path of a config file: thresholds.yml -> thresholds.local.yml"""
    root, ext = os.path.splitext(config_path)
    return f"{root}.local{ext}"


def read_config_file(config_path: str) -> Dict[str, Any]:
    """Parse a YAML or JSON configuration file into a mapping

    Raises:
        ConfigurationError: If the file cannot be read, parsed, or is not a mapping
    """
    try:
        with open(config_path, 'r') as f:
            if config_path.endswith('.json'):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Error loading config file {config_path}: {e}")
        raise ConfigurationError(f"Error loading config file: {e}", {'config_path': config_path}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping",
                                 {'config_path': config_path})
    return data


def coerce_env_value(value: str) -> Any:
    """Environment strings become bool, int or float where they read as one"""
    lowered = value.strip().lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def env_overrides(environ: Mapping[str, str], prefix: str) -> Dict[str, Any]:
    """Nested override mapping from PREFIX_SECTION__KEY=value variables"""
    overrides: Dict[str, Any] = {}
    for name, value in environ.items():
        if not name.startswith(prefix):
            continue
        path = name[len(prefix):].lower().split("__")
        node = overrides
        for part in path[:-1]:
            node = node.setdefault(part, {})
        node[path[-1]] = coerce_env_value(value)
    return overrides


def deep_merge(target: Dict[str, Any], source: Mapping[str, Any]) -> None:
    """Merge source into target in place; nested mappings merge, other values replace"""
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            deep_merge(target[key], value)
        else:
            target[key] = value


class ConfigManager:
    """Configuration for one seqassign run"""

    ENV_PREFIX = "SEQASSIGN_"

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """Resolve configuration from defaults, files and the environment

        Args:
            config_path: YAML or JSON configuration file (optional)
            environ: Environment to read overrides from (defaults to os.environ)
        """
        self.logger = logger
        self.config_path = config_path
        self.config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        self.sources: List[str] = ['defaults']

        if config_path:
            if os.path.exists(config_path):
                self._merge_file(config_path)
                local_path = local_config_path(config_path)
                if os.path.exists(local_path):
                    self._merge_file(local_path)
            else:
                self.logger.warning(f"Configuration file not found: {config_path}, using defaults")

        overrides = env_overrides(os.environ if environ is None else environ, self.ENV_PREFIX)
        if overrides:
            deep_merge(self.config, overrides)
            self.sources.append('environment')

        self.errors: List[str] = ConfigSchema.validate(self.config)
        for error in self.errors:
            self.logger.error(f"Configuration error: {error}")
        self.logger.debug(f"Configuration resolved from {', '.join(self.sources)}")

    def _merge_file(self, path: str) -> None:
        deep_merge(self.config, read_config_file(path))
        self.sources.append(path)
        self.logger.info(f"Loaded configuration from {path}")

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a dotted key such as 'classification.lowscore', or default"""
        node: Any = self.config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_section(self, section: str) -> Dict[str, Any]:
        """Copy of a configuration section (empty if absent)"""
        value = self.config.get(section)
        return dict(value) if isinstance(value, dict) else {}

    def get_path(self, path_name: str, default: str = "") -> str:
        """Entry of the 'paths' section"""
        return self.get_section('paths').get(path_name, default)
