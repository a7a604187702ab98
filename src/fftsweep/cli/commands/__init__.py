"""CLI command modules for fftsweep."""

from .config import config
from .plots import plots
from .sweep import sweep

__all__ = [
    "config",
    "plots",
    "sweep",
]
