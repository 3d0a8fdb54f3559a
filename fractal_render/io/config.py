"""
Configuration file handling.

Render settings can be kept in JSON or YAML files. Values from the file are
merged over DEFAULT_CONFIG and turned into a RenderConfig; command-line
options are applied on top by the caller.
"""

from typing import Any, Dict, List, Optional, Union
from pathlib import Path
import json
import logging

import yaml

from ..api import RenderConfig
from .parsing import parse_complex

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'width': 1000,
    'height': 1000,
    'upper_left': [-2.0, 2.0],
    'lower_right': [2.0, -2.0],
    'fractal': 'mandelbrot',
    'seed': None,
    'palette': 'wikipedia',
    'num_processes': None,
    'rows_per_band': 1,
    'correct_aspect': True,
    'save_metadata': True,
}

_COMPLEX_KEYS = ('upper_left', 'lower_right', 'seed')


def _is_positive_int(value: Any) -> bool:
    # bool is an int subclass; true/false in a config file are not sizes
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def to_complex(value: Any) -> complex:
    """Accept "re,im" strings, [re, im] lists and plain numbers."""
    if isinstance(value, complex):
        return value
    if isinstance(value, str):
        return parse_complex(value)
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            raise ValueError(f"Complex value must be [re, im], got {value}")
        return complex(float(value[0]), float(value[1]))
    if isinstance(value, (int, float)):
        return complex(value)
    raise ValueError(f"Cannot interpret {value!r} as a complex number")


class ConfigManager:
    """Loads, validates and converts render configuration files."""

    supported_suffixes = ('.json', '.yaml', '.yml')

    def load_config(self, path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load a configuration file merged over the defaults.

        Args:
            path: JSON or YAML file; None returns the defaults

        Returns:
            Configuration dictionary
        """
        config = dict(DEFAULT_CONFIG)
        if path is None:
            return config

        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise ValueError(f"Unsupported config format '{suffix}'. "
                             f"Supported: {', '.join(self.supported_suffixes)}")

        with open(path, 'r', encoding='utf-8') as f:
            if suffix == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level")

        errors = self.validate_config(data)
        if errors:
            raise ValueError(f"Invalid config file {path}: " + '; '.join(errors))

        config.update(data)
        logger.info(f"Loaded configuration from {path}")
        return config

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Check a configuration dictionary.

        Returns:
            List of error messages, empty when the configuration is valid
        """
        errors = []
        for key in config:
            if key not in DEFAULT_CONFIG:
                errors.append(f"unknown key '{key}'")

        for key in ('width', 'height', 'rows_per_band'):
            if key in config and not _is_positive_int(config[key]):
                errors.append(f"'{key}' must be a positive integer")

        if config.get('num_processes') is not None:
            value = config['num_processes']
            if not _is_positive_int(value):
                errors.append("'num_processes' must be a positive integer or null")

        for key in _COMPLEX_KEYS:
            if config.get(key) is not None:
                try:
                    to_complex(config[key])
                except ValueError as e:
                    errors.append(f"'{key}': {e}")

        return errors

    def create_render_config(self, config: Dict[str, Any], **overrides) -> RenderConfig:
        """
        Build a RenderConfig from a configuration dictionary.

        Args:
            config: Dictionary as returned by load_config
            **overrides: Values taking precedence over the dictionary; None
                values are ignored

        Returns:
            RenderConfig instance
        """
        merged = dict(DEFAULT_CONFIG)
        merged.update(config)
        merged.update({k: v for k, v in overrides.items() if v is not None})

        for key in _COMPLEX_KEYS:
            if merged.get(key) is not None:
                merged[key] = to_complex(merged[key])

        return RenderConfig(**merged)
