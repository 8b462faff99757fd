"""
Configuration Management for GESTURE SIGNAL

Loads and provides access to configuration from config.json.
Allows runtime configuration of the detection cadence, smoothing windows,
hysteresis thresholds and loss debounce, plus the host camera/model settings.
Supports both plain values and the [value, description] format.
"""

import copy
import json
from pathlib import Path
from typing import Dict, Any, Optional, Tuple


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.json"


class Config:
    """
    Singleton configuration manager that loads from config.json
    """
    _instance = None
    _config_data: Dict[str, Any] = {}
    _config_path: str = ""

    def __new__(cls, *args, **kwargs):
        # Accept Config(path) without breaking the singleton.
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration from JSON file.

        Args:
            config_path: Path to config.json. If provided, force reload from
                         that path. If None, load from the default location
                         only on first initialization.
        """
        if config_path is not None:
            self._config_path = str(config_path)
            self.reload()
            return

        if not self._config_data:  # Only load once
            self._config_path = str(DEFAULT_CONFIG_PATH)
            self.reload()

    @property
    def path(self) -> str:
        return self._config_path

    def reload(self):
        """Reload configuration from file."""
        try:
            with open(self._config_path, 'r') as f:
                self._config_data = json.load(f)
            print(f"✓ Loaded configuration from {self._config_path}")
        except FileNotFoundError:
            print(f"⚠ Config file not found: {self._config_path}")
            print("  Using default values")
            self._config_data = self._get_defaults()
        except json.JSONDecodeError as e:
            print(f"⚠ Error parsing config file: {e}")
            print("  Using default values")
            self._config_data = self._get_defaults()

    def save(self):
        """Save current configuration back to file."""
        try:
            with open(self._config_path, 'w') as f:
                json.dump(self._config_data, f, indent=2)
            print(f"✓ Saved configuration to {self._config_path}")
        except OSError as e:
            print(f"✗ Error saving config: {e}")

    def get(self, *keys, default=None) -> Any:
        """
        Get configuration value by key path.
        Handles both plain values and the [value, description] format.

        Examples:
            config.get('hysteresis', 'open_threshold')  # Returns 1.6
            config.get('scheduler', 'detection_interval_ms')

        Args:
            keys: Path to value (e.g., 'smoothing', 'position_window')
            default: Default value if path doesn't exist

        Returns:
            Configuration value or default
        """
        current = self._config_data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        if isinstance(current, list) and len(current) >= 1:
            return current[0]

        return current

    def get_with_description(self, *keys, default=None) -> Tuple[Any, str]:
        """
        Get configuration value AND description.

        Returns:
            Tuple of (value, description) or (default, "")
        """
        current = self._config_data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return (default, "")

        if isinstance(current, list):
            if len(current) >= 2:
                return (current[0], current[1])
            elif len(current) == 1:
                return (current[0], "")

        return (current, "")

    def set(self, *keys, value):
        """
        Set configuration value by key path. A [value, description] entry
        keeps its description.

        Example:
            config.set('tracking', 'loss_threshold', value=8)
        """
        if len(keys) == 0:
            return

        current = self._config_data
        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        existing = current.get(keys[-1])
        if isinstance(existing, list) and len(existing) >= 2:
            existing[0] = value
        else:
            current[keys[-1]] = value

    def _get_defaults(self) -> Dict:
        """Return default configuration values."""
        return copy.deepcopy(DEFAULTS)

    @property
    def data(self) -> Dict:
        """Get entire configuration dictionary."""
        return self._config_data


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "scheduler": {
        "detection_interval_ms": 60,
        "frame_interval_ms": 16
    },
    "smoothing": {
        "position_window": 8,
        "ratio_window": 5,
        "ratio_epsilon": 1e-6
    },
    "hysteresis": {
        "open_threshold": 1.6,
        "close_threshold": 1.2
    },
    "tracking": {
        "loss_threshold": 5,
        "failures_count_as_misses": True
    },
    "camera": {
        "index": 0,
        "width": 640,
        "height": 480,
        "flip_horizontal": False
    },
    "model": {
        "use_gpu": True,
        "max_hands": 1,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5
    },
    "display": {
        "show_preview": True,
        "mirror_preview": True,
        "window_name": "GESTURE SIGNAL",
        "config_poll_interval_s": 1.0
    },
    "performance": {
        "show_debug_info": False
    },
    "app_control": {
        "pause": False,
        "exit": False
    }
}


# Global configuration instance
config = Config()


def get_setting(section: str, param_name: str, default=None, cfg=None):
    """Get a parameter from one configuration section."""
    source = cfg if cfg is not None else config
    return source.get(section, param_name, default=default)