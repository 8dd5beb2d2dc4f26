"""
Configuration Management
========================

TOML-based configuration for the wasteml CLI.

Configuration files are merged in the following order (highest priority first):
1. Path specified via --config option
2. ./wasteml.toml (current directory)
3. ~/.config/wasteml/config.toml (user config)
4. /etc/wasteml/config.toml (system config)
5. Built-in defaults

The built-in defaults reproduce the classic run: train on ./WasteDataset,
save ./WasteClassificationModel.zip, predict ./TestImages and write
./Predictions.csv.

Example configuration file (wasteml.toml):

    [dataset]
    root = "WasteDataset"
    extensions = [".jpg", ".png"]
    case_sensitive = true

    [split]
    test_fraction = 0.2
    seed = 1

    [training]
    architecture = "resnet101"
    pretrained = true
    image_size = 224
    epochs = 10
    batch_size = 10
    learning_rate = 0.01
    reuse_train_bottleneck = true
    reuse_validation_bottleneck = true

    [model]
    path = "WasteClassificationModel.zip"

    [predict]
    folder = "TestImages"
    output_csv = "Predictions.csv"
    min_confidence = 0.0

    [logging]
    level = "WARNING"
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from wasteml.core.files import BinaryFile, TextFile, ensure_parent_directory

logger = logging.getLogger(__name__)

# Use tomli for Python < 3.11, tomllib for Python >= 3.11
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


DEFAULT_CONFIG: Dict[str, Any] = {
    "dataset": {
        "root": "WasteDataset",
        "extensions": [".jpg", ".png"],
        "case_sensitive": True,
    },
    "split": {
        "test_fraction": 0.2,
        "seed": 1,
    },
    "training": {
        "architecture": "resnet101",
        "pretrained": True,
        "image_size": 224,
        "epochs": 10,
        "batch_size": 10,
        "learning_rate": 0.01,
        "reuse_train_bottleneck": True,
        "reuse_validation_bottleneck": True,
    },
    "model": {
        "path": "WasteClassificationModel.zip",
    },
    "predict": {
        "folder": "TestImages",
        "output_csv": "Predictions.csv",
        "min_confidence": 0.0,
    },
    "logging": {
        "level": "WARNING",
    },
}

CONFIG_FILENAME = "wasteml.toml"

# Standard config file locations, highest priority first
CONFIG_LOCATIONS = [
    Path(CONFIG_FILENAME),
    Path("~/.config/wasteml/config.toml").expanduser(),
    Path("/etc/wasteml/config.toml"),
]


@dataclass
class Config:
    """
    Configuration container for wasteml settings.

    Attributes:
        dataset: Dataset scanning settings
        split: Train/test split settings
        training: Trainer hyperparameters
        model: Model artifact settings
        predict: Batch prediction settings
        logging: Logging settings
        _source: Path to the config file that was loaded last
    """

    dataset: Dict[str, Any] = field(default_factory=dict)
    split: Dict[str, Any] = field(default_factory=dict)
    training: Dict[str, Any] = field(default_factory=dict)
    model: Dict[str, Any] = field(default_factory=dict)
    predict: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)
    _source: Optional[str] = None

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        section_dict = getattr(self, section, {})
        if section_dict is None:
            return default
        return section_dict.get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        section_dict = getattr(self, section, None)
        if section_dict is not None:
            section_dict[key] = value

    @property
    def source(self) -> Optional[str]:
        return self._source

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "dataset": self.dataset,
            "split": self.split,
            "training": self.training,
            "model": self.model,
            "predict": self.predict,
            "logging": self.logging,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        """Create Config from dictionary."""
        return cls(
            dataset=data.get("dataset", {}),
            split=data.get("split", {}),
            training=data.get("training", {}),
            model=data.get("model", {}),
            predict=data.get("predict", {}),
            logging=data.get("logging", {}),
            _source=source,
        )


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a TOML configuration file.

    Raises:
        FileNotFoundError: If file doesn't exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with BinaryFile(path, mode="rb") as f:
        return tomllib.load(f.handle)


def _format_toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, list):
        return "[" + ", ".join(_format_toml_value(v) for v in value) + "]"
    return str(value)


def save_toml(config: Dict[str, Any], filepath: Union[str, Path]) -> str:
    """
    Save configuration to a TOML file.

    Only flat sections are supported, which is all wasteml needs.

    Returns:
        Path to the saved file
    """
    path = ensure_parent_directory(filepath)

    lines = []
    for section, values in config.items():
        if isinstance(values, dict) and values:
            lines.append(f"[{section}]")
            for key, value in values.items():
                if value is None:
                    continue
                lines.append(f"{key} = {_format_toml_value(value)}")
            lines.append("")

    with TextFile(path, mode="w") as f:
        f.write("\n".join(lines))

    return str(path)


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config.from_dict(_deep_copy_dict(DEFAULT_CONFIG))


def create_default_config_file(filepath: Optional[str] = None) -> str:
    """
    Create a default configuration file.

    Args:
        filepath: Path to create the file (default: ./wasteml.toml)

    Returns:
        Path to the created file
    """
    return save_toml(DEFAULT_CONFIG, filepath or CONFIG_FILENAME)


def _check_sections(data: Dict[str, Any], location: Union[str, Path]) -> Dict[str, Any]:
    """Reject files where a known section is not a table."""
    for name in DEFAULT_CONFIG:
        if name in data and not isinstance(data[name], dict):
            raise ValueError(f"{location}: [{name}] must be a table, got {type(data[name]).__name__}")
    return data


def get_config_locations() -> List[Path]:
    """Get configuration file search locations in priority order (highest first)."""
    return CONFIG_LOCATIONS.copy()


def load_config(explicit_path: Optional[str] = None) -> Config:
    """
    Load configuration with full cascade support.

    Merges configs in priority order:
    defaults -> system -> user -> current dir -> explicit

    A config file that fails to parse is logged and skipped. An explicit
    path that does not exist is an error.

    Args:
        explicit_path: Explicit config file path (highest priority)

    Returns:
        Config object with merged settings from all sources

    Raises:
        FileNotFoundError: If explicit_path is given but does not exist
        ValueError: If explicit_path is not valid TOML or a section is not a table
    """
    config_data = _deep_copy_dict(DEFAULT_CONFIG)
    source = None

    # Load in reverse order (lowest to highest priority) so higher overrides lower
    for location in reversed(get_config_locations()):
        if location.exists():
            try:
                config_data = _merge_dicts(config_data, _check_sections(load_toml(location), location))
                source = str(location)
                logger.debug(f"Merged configuration from {location}")
            except (OSError, ValueError) as e:
                logger.warning(f"Error loading {location}: {e}")

    if explicit_path:
        config_data = _merge_dicts(
            config_data, _check_sections(load_toml(explicit_path), explicit_path)
        )
        source = str(explicit_path)
        logger.info(f"Loaded configuration from {explicit_path}")

    return Config.from_dict(config_data, source=source)


def _deep_copy_dict(d: Dict[str, Any]) -> Dict[str, Any]:
    """Create a deep copy of a dictionary."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy_dict(value)
        elif isinstance(value, list):
            result[key] = value.copy()
        else:
            result[key] = value
    return result


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two dictionaries, with override taking precedence."""
    result = _deep_copy_dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


# Global configuration instance
_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration (will reload on next access)."""
    global _global_config
    _global_config = None
