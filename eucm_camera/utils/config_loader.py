"""Configuration loading utilities."""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .logger import get_logger

logger = get_logger(__name__)

# Built-in defaults; a config file only needs the keys it changes.
DEFAULT_CONFIG: Dict[str, Any] = {
    "calibration": None,
    "roundtrip": {
        "width": 1920,
        "height": 1080,
        "border": 5,
        "step": 65,
        "precisions": ["float32", "float64"],
        "tolerance": {
            "float32": 1.0e-3,
            "float64": 1.0e-12,
        },
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


class ConfigLoader:
    """Load and manage YAML configurations."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Default directory for config files.
        """
        self.config_dir = Path(config_dir) if config_dir else Path("configs")
        self._cache: Dict[str, Dict] = {}

    def resolve(self, config_path: Union[str, Path]) -> Path:
        """
        Resolve a config path.

        Absolute paths and relative paths that exist as given are used
        unchanged; anything else is looked up in config_dir.
        """
        config_path = Path(config_path)

        if config_path.is_absolute() or config_path.exists():
            return config_path

        return self.config_dir / config_path

    def load(
        self,
        config_path: Union[str, Path],
        use_cache: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to config file.
            use_cache: Whether to use cached config.

        Returns:
            Configuration dictionary.

        Raises:
            FileNotFoundError: If the file (or an included file) is missing.
        """
        config_path = self.resolve(config_path)
        cache_key = str(config_path)

        if use_cache and cache_key in self._cache:
            return copy.deepcopy(self._cache[cache_key])

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        config = self._process_includes(config, config_path.parent)
        logger.debug(f"Loaded config {config_path}")

        if use_cache:
            self._cache[cache_key] = config

        return copy.deepcopy(config)

    def _process_includes(
        self,
        config: Any,
        base_dir: Path,
    ) -> Any:
        """
        Process "!include <file>" string values.

        The included YAML document replaces the string. Paths are relative
        to the including file, which lets a config pull in a calibration file
        stored next to it.

        Args:
            config: Configuration value.
            base_dir: Base directory for relative includes.

        Returns:
            Processed configuration.
        """
        if not isinstance(config, dict):
            return config

        result = {}

        for key, value in config.items():
            if isinstance(value, str) and value.startswith("!include "):
                include_path = base_dir / value[len("!include "):].strip()
                if not include_path.exists():
                    raise FileNotFoundError(f"Included file not found: {include_path}")
                with open(include_path, "r", encoding="utf-8") as f:
                    result[key] = yaml.safe_load(f)
            elif isinstance(value, dict):
                result[key] = self._process_includes(value, base_dir)
            else:
                result[key] = value

        return result

    def merge(
        self,
        base: Dict[str, Any],
        override: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Deep merge two configurations.

        Args:
            base: Base configuration.
            override: Override configuration.

        Returns:
            Merged configuration. Neither input is modified.
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def save(
        self,
        config: Dict[str, Any],
        path: Union[str, Path],
    ) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Configuration dictionary.
            path: Output file path.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    def clear_cache(self) -> None:
        """Clear configuration cache."""
        self._cache.clear()


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Load configuration on top of the built-in defaults.

    Args:
        config_path: Path to config file. Defaults only if None.
        overrides: Optional overrides to apply last.

    Returns:
        Configuration dictionary.
    """
    loader = ConfigLoader()
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        config = loader.merge(config, loader.load(config_path))

    if overrides:
        config = loader.merge(config, overrides)

    return config


def get_nested(
    config: Dict[str, Any],
    key: str,
    default: Any = None,
) -> Any:
    """
    Get nested config value using dot notation.

    Args:
        config: Configuration dictionary.
        key: Dot-separated key (e.g., 'roundtrip.tolerance.float32').
        default: Default value if key not found.

    Returns:
        Config value or default.
    """
    value = config

    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value
