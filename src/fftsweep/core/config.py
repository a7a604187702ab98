"""
Configuration Management
========================

This module provides TOML-based configuration file support for fftsweep.

Configuration files are searched in the following order (highest to lowest priority):
1. Path specified via --config option
2. ./fftsweep.toml (current directory)
3. ~/.config/fftsweep/config.toml (user config)
4. Built-in defaults

Example configuration file (fftsweep.toml):

    [data]
    domain = "terrestrial"
    dayfirst = true

    [sweep]
    sample_rates = [22050, 44100]
    nfft_values = [512, 1024]
    overlaps = [0.0, 0.5]

    [kde]
    extent = "shared"

    [output]
    dir = "results/terrestrial"
    plots = false

    [batch]
    workers = 4
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from fftsweep.core.domains import get_domain

logger = logging.getLogger(__name__)

# Use tomli for Python < 3.11, tomllib for Python >= 3.11
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


KDE_EXTENTS = ("shared", "per_cohort")

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "data": {
        "domain": "underwater",
        "dayfirst": False,
        "period_column": "Period",
        "period_value": "Night",
    },
    "sweep": {
        "sample_rates": [8000, 16000, 22050, 44100, 48000],
        "nfft_values": [256, 512, 1024, 2048, 4096],
        "overlaps": [0.0, 0.25, 0.5, 0.7, 0.75],
        "overlap_tolerance": 1e-6,
    },
    "indices": {
        "columns": ["H", "ACI", "AEI", "ADI", "NDSI"],
    },
    "ordination": {
        "seed": 42,
        "n_init": 2,
        "max_iter": 300,
        "eps": 1e-3,
    },
    "kde": {
        "grid_size": 100,
        "percentile": 95.0,
        "extent": "shared",
    },
    "output": {
        "dir": "results",
        "filename": "descriptors.csv",
        "plots": True,
        "dpi": 150,
        "include_diagnostics": False,
    },
    "batch": {
        "workers": 1,
    },
    "logging": {
        "level": "INFO",
    },
}

# Standard config file locations
CONFIG_LOCATIONS = [
    Path("fftsweep.toml"),
    Path("~/.config/fftsweep/config.toml").expanduser(),
]


@dataclass
class Config:
    """
    Configuration container for fftsweep settings.

    Attributes:
        data: Input parsing settings (domain, date parsing, period filter)
        sweep: Swept FFT parameter value sets
        indices: Acoustic index columns used for ordination
        ordination: NMDS settings (seed, restarts, iterations)
        kde: Kernel density grid settings
        output: Output directory, file name and plot settings
        batch: Worker pool settings
        logging: Logging settings
        _source: Path to the config file that was loaded
    """

    data: Dict[str, Any] = field(default_factory=dict)
    sweep: Dict[str, Any] = field(default_factory=dict)
    indices: Dict[str, Any] = field(default_factory=dict)
    ordination: Dict[str, Any] = field(default_factory=dict)
    kde: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)
    batch: Dict[str, Any] = field(default_factory=dict)
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

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "data": self.data,
            "sweep": self.sweep,
            "indices": self.indices,
            "ordination": self.ordination,
            "kde": self.kde,
            "output": self.output,
            "batch": self.batch,
            "logging": self.logging,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        """Create Config from dictionary."""
        return cls(
            data=data.get("data", {}),
            sweep=data.get("sweep", {}),
            indices=data.get("indices", {}),
            ordination=data.get("ordination", {}),
            kde=data.get("kde", {}),
            output=data.get("output", {}),
            batch=data.get("batch", {}),
            logging=data.get("logging", {}),
            _source=source,
        )

    def copy(self) -> "Config":
        """Return an independent copy of this configuration."""
        return Config.from_dict(_deep_copy_dict(self.to_dict()), source=self._source)

    def to_settings(self) -> "SweepSettings":
        """Build the immutable settings passed to each grid-point evaluation."""
        return SweepSettings(
            domain=self.get("data", "domain", "underwater"),
            sample_rates=tuple(_as_number(v) for v in self.get("sweep", "sample_rates", [])),
            nfft_values=tuple(int(v) for v in self.get("sweep", "nfft_values", [])),
            overlaps=tuple(float(v) for v in self.get("sweep", "overlaps", [])),
            overlap_tolerance=float(self.get("sweep", "overlap_tolerance", 1e-6)),
            index_columns=tuple(self.get("indices", "columns", [])),
            seed=int(self.get("ordination", "seed", 42)),
            n_init=int(self.get("ordination", "n_init", 2)),
            max_iter=int(self.get("ordination", "max_iter", 300)),
            eps=float(self.get("ordination", "eps", 1e-3)),
            grid_size=int(self.get("kde", "grid_size", 100)),
            percentile=float(self.get("kde", "percentile", 95.0)),
            kde_extent=self.get("kde", "extent", "shared"),
        )


@dataclass(frozen=True)
class SweepSettings:
    """
    Immutable, picklable settings for evaluating grid points.

    Built from a Config with Config.to_settings(); safe to send to worker
    processes.
    """

    domain: str = "underwater"
    sample_rates: Tuple[float, ...] = (8000, 16000, 22050, 44100, 48000)
    nfft_values: Tuple[int, ...] = (256, 512, 1024, 2048, 4096)
    overlaps: Tuple[float, ...] = (0.0, 0.25, 0.5, 0.7, 0.75)
    overlap_tolerance: float = 1e-6
    index_columns: Tuple[str, ...] = ("H", "ACI", "AEI", "ADI", "NDSI")
    seed: int = 42
    n_init: int = 2
    max_iter: int = 300
    eps: float = 1e-3
    grid_size: int = 100
    percentile: float = 95.0
    kde_extent: str = "shared"

    def __post_init__(self) -> None:
        get_domain(self.domain)
        if not self.sample_rates or not self.nfft_values or not self.overlaps:
            raise ValueError("sample_rates, nfft_values and overlaps must all be non-empty")
        if not self.index_columns:
            raise ValueError("At least one index column is required")
        if self.overlap_tolerance < 0:
            raise ValueError(f"overlap_tolerance must be >= 0, got {self.overlap_tolerance}")
        if self.n_init < 1 or self.max_iter < 1:
            raise ValueError("n_init and max_iter must be positive")
        if self.grid_size < 2:
            raise ValueError(f"grid_size must be at least 2, got {self.grid_size}")
        if not 0 < self.percentile < 100:
            raise ValueError(f"percentile must be in (0, 100), got {self.percentile}")
        if self.kde_extent not in KDE_EXTENTS:
            raise ValueError(
                f"Invalid KDE extent: {self.kde_extent}. Must be one of {KDE_EXTENTS}"
            )


def _as_number(value: Any) -> Union[int, float]:
    """Return value as an int when it is integral, otherwise as a float."""
    number = float(value)
    return int(number) if number.is_integer() else number


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a TOML configuration file.

    Args:
        filepath: Path to the TOML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with open(path, "rb") as f:
        return tomllib.load(f)


def format_toml(config: Dict[str, Any]) -> str:
    """Render a one-level configuration dictionary as TOML text."""
    lines = []
    for section, values in config.items():
        if isinstance(values, dict) and values:
            lines.append(f"[{section}]")
            for key, value in values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                elif isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, (int, float)):
                    lines.append(f"{key} = {value}")
                elif isinstance(value, list):
                    items = ", ".join(f'"{v}"' if isinstance(v, str) else str(v) for v in value)
                    lines.append(f"{key} = [{items}]")
            lines.append("")
    return "\n".join(lines)


def save_toml(config: Dict[str, Any], filepath: Union[str, Path]) -> str:
    """
    Save configuration to a TOML file.

    Args:
        config: Configuration dictionary
        filepath: Path to save the file

    Returns:
        Path to the saved file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(format_toml(config))

    return str(path)


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Find the configuration file to use.

    Args:
        config_path: Explicit path to config file (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if config_path:
        path = Path(config_path)
        if path.exists():
            return path
        logger.warning(f"Specified config file not found: {config_path}")
        return None

    for location in CONFIG_LOCATIONS:
        if location.exists():
            return location

    return None


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Config object with merged settings
    """
    config_data = _deep_copy_dict(DEFAULT_CONFIG)

    config_file = find_config_file(config_path)

    if config_file:
        try:
            file_config = load_toml(config_file)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Error loading config file {config_file}: {e}")
        else:
            config_data = _merge_dicts(config_data, file_config)
            logger.info(f"Loaded configuration from {config_file}")
            return Config.from_dict(config_data, source=str(config_file))

    return Config.from_dict(config_data)


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config.from_dict(_deep_copy_dict(DEFAULT_CONFIG))


def create_default_config_file(filepath: Optional[str] = None) -> str:
    """
    Create a default configuration file.

    Args:
        filepath: Path to create the file (default: ./fftsweep.toml)

    Returns:
        Path to the created file
    """
    if filepath is None:
        filepath = "fftsweep.toml"

    return save_toml(DEFAULT_CONFIG, filepath)


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
