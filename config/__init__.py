"""
Configuration Module for Invoice Extraction System.

Settings live in YAML. The bundled ``settings.yaml`` holds every default;
a custom file (passed explicitly or named by $INVOICE_EXTRACTION_CONFIG)
only needs the keys it changes and is merged on top of the defaults.

Components read their values once, at construction time, and accept
explicit keyword overrides, so the extraction engine itself never
consults configuration while it runs.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


# Environment variable that may point at an alternative settings file
CONFIG_ENV_VAR = "INVOICE_EXTRACTION_CONFIG"

DEFAULT_SETTINGS = Path(__file__).parent / "settings.yaml"


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` onto a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """
    Process-wide settings for the invoice extraction system.

    A single instance is shared by every component; ``reset()`` drops it so
    the next access reloads from disk (used by the CLI ``--config`` flag
    and by tests).

    Attributes:
        config_path (Path): Custom settings file, or the bundled defaults.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("ocr.timeout_seconds")
        60
        >>> config.get("output.report.timezone")
        'Asia/Kolkata'
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._initialized = False
            cls._instance = instance
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load settings on first construction.

        Args:
            config_path: Custom settings file. Falls back to
                        $INVOICE_EXTRACTION_CONFIG, then the bundled defaults.
                        Ignored once the shared instance is loaded.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(config_path) if config_path else DEFAULT_SETTINGS

        self._config: Dict[str, Any] = {}
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Read the defaults, overlay the custom file, resolve paths.

        Raises:
            FileNotFoundError: If a settings file doesn't exist.
            yaml.YAMLError: If a settings file is not valid YAML.
        """
        settings = _read_yaml(DEFAULT_SETTINGS)
        if self.config_path != DEFAULT_SETTINGS:
            settings = _merge(settings, _read_yaml(self.config_path))

        # Relative output locations are taken from the working directory
        cwd = Path.cwd()
        for key, value in settings.get('paths', {}).items():
            if value and not Path(value).is_absolute():
                settings['paths'][key] = str(cwd / value)

        self._config = settings

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value by dotted key.

        Args:
            key: Dotted path into the settings (e.g., "ocr.timeout_seconds").
            default: Returned when any part of the path is missing.

        Example:
            >>> config.get("extraction.min_text_length")
            10
            >>> config.get("extraction.unknown", 0)
            0
        """
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def section(self, key: str) -> Dict[str, Any]:
        """A copy of one settings section (empty when absent)."""
        value = self.get(key, {})
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    def reload(self) -> None:
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance; the next access reloads from disk."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Shortcut for ``ConfigurationManager().get(key, default)``.

    Example:
        >>> get_config("ocr.timeout_seconds", 60)
        60
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
