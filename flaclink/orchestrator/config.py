#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management for flaclink.
Loads an optional YAML config from the data directory with environment
variable support, falling back to built-in defaults.
"""

import logging
import os
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import ConfigError

logger = logging.getLogger(__name__)

DATA_DIR_NAME = ".flaclink"
REGISTRY_FILENAME = "albums.db"
CONFIG_FILENAME = "config.yaml"


def default_data_dir() -> Path:
    """Application data directory under the invoking user's home"""
    return Path.home() / DATA_DIR_NAME


class ConfigManager:
    """
    Configuration manager that loads settings from a YAML file.

    The data directory holds the album registry and the optional
    config.yaml. Pass `data_dir` to keep everything somewhere other than
    ~/.flaclink (tests do this).
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self.config_path = self.data_dir / CONFIG_FILENAME
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load config file, or defaults if there isn't one"""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Can't load config file {self.config_path}: {e}") from e
            if not isinstance(self._config, dict):
                raise ConfigError(f"Config file {self.config_path} must hold a mapping")
            logger.debug("Loaded config from %s", self.config_path)
        else:
            self._config = self._default_config()

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            'registry': {
                'filename': REGISTRY_FILENAME,
                'lock_timeout': 0.1
            },
            'detection': {
                'audio_extensions': ['.flac']
            },
            'replication': {
                'staging_prefix': '.flaclink-staging-'
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value with dot notation.

        Examples:
            config.get('registry.lock_timeout')
            config.get('detection.audio_extensions')

        Environment variables are expanded if value is like ${VAR_NAME}
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default

        if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
            env_var = value[2:-1]
            return os.environ.get(env_var, default)

        return value

    def setup_data_dir(self) -> Path:
        """Create the data directory if it doesn't exist yet"""
        if not self.data_dir.exists():
            try:
                self.data_dir.mkdir(parents=True, mode=0o755)
            except OSError as e:
                raise ConfigError(f"Can't create data directory {self.data_dir}: {e}") from e
            logger.info("Created data directory at %s.", self.data_dir)
        return self.data_dir

    @property
    def registry_path(self) -> Path:
        return self.data_dir / self.get('registry.filename', REGISTRY_FILENAME)

    @property
    def lock_timeout(self) -> float:
        return float(self.get('registry.lock_timeout', 0.1))

    @property
    def audio_extensions(self) -> List[str]:
        extensions = self.get('detection.audio_extensions', ['.flac'])
        return [ext.lower() if ext.startswith('.') else f".{ext.lower()}" for ext in extensions]

    @property
    def staging_prefix(self) -> str:
        return self.get('replication.staging_prefix', '.flaclink-staging-')

    def __repr__(self) -> str:
        return f"ConfigManager(data_dir={self.data_dir}, config={self.config_path})"
