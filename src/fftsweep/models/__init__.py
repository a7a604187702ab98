"""Data models for fftsweep."""

from fftsweep.models.base import ToDictMixin
from fftsweep.models.sweep import GridPreview, GridPreviewEntry, SweepSummary

__all__ = [
    "ToDictMixin",
    "SweepSummary",
    "GridPreview",
    "GridPreviewEntry",
]
