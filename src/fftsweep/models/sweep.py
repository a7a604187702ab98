"""Sweep result models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fftsweep.models.base import ToDictMixin


@dataclass
class SweepSummary(ToDictMixin):
    """Summary of a completed descriptor sweep."""

    domain: str
    input_path: str = ""
    total_points: int = 0
    evaluated_points: int = 0
    valid_rows: int = 0
    skip_counts: Dict[str, int] = field(default_factory=dict)
    non_converged: int = 0
    output_path: Optional[str] = None
    plot_paths: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def skipped(self) -> int:
        """Grid points that produced no row."""
        return sum(self.skip_counts.values())

    @property
    def empty(self) -> bool:
        """True when the sweep produced no valid rows."""
        return self.valid_rows == 0

    def _to_dict_extra(self) -> Optional[Dict[str, Any]]:
        return {"skipped": self.skipped, "empty": self.empty}


@dataclass
class GridPreviewEntry(ToDictMixin):
    """Observation counts for one grid point."""

    group: str
    fs: Any
    nfft: int
    overlap: float
    n_observations: int = 0
    habitat_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class GridPreview(ToDictMixin):
    """Observation counts for every point of a parameter grid."""

    domain: str
    entries: List[GridPreviewEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def matching(self) -> List[GridPreviewEntry]:
        """Entries with at least one matching observation."""
        return [e for e in self.entries if e.n_observations > 0]
