"""
Per-Grid-Point Evaluation
=========================

``evaluate_grid_point`` turns the observations of one grid point into
either a DescriptorRow or a skip reason. It depends only on its
arguments, so grid points can be evaluated in any order or in separate
worker processes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from fftsweep.core.analysis.descriptors import compute_descriptors
from fftsweep.core.analysis.grid import GridPoint
from fftsweep.core.analysis.ordination import OrdinationResult, run_ordination
from fftsweep.core.analysis.selection import SkipReason, check_spread, check_subset
from fftsweep.core.config import SweepSettings
from fftsweep.core.exceptions import SkippedGridPoint

logger = logging.getLogger(__name__)

__all__ = ["DescriptorRow", "GridPointOutcome", "evaluate_grid_point"]


@dataclass
class DescriptorRow:
    """One output record: grid parameters plus separation descriptors."""

    group: str
    fs: Any
    overlap: float
    nfft: int
    centroid_distance: float
    habitat1_dispersion: float
    habitat2_dispersion: float
    kde_overlap: float
    bhattacharyya_coefficient: float
    nmds_stress: float = float("nan")
    nmds_converged: bool = True

    def to_record(self, group_column: str, include_diagnostics: bool = False) -> Dict[str, Any]:
        """Row as a mapping of output column name to value."""
        record = {
            group_column: self.group,
            "FS": self.fs,
            "Overlap": self.overlap,
            "NFFT": self.nfft,
            "Centroid_Distance": self.centroid_distance,
            "Habitat1_Dispersion": self.habitat1_dispersion,
            "Habitat2_Dispersion": self.habitat2_dispersion,
            "KDE_Overlap": self.kde_overlap,
            "Bhattacharyya_Coefficient": self.bhattacharyya_coefficient,
        }
        if include_diagnostics:
            record["NMDS_Stress"] = self.nmds_stress
            record["NMDS_Converged"] = self.nmds_converged
        return record


@dataclass
class GridPointOutcome:
    """
    Result of evaluating one grid point.

    Exactly one of ``row`` and ``skip_reason`` is set.
    """

    index: int
    point: GridPoint
    row: Optional[DescriptorRow] = None
    skip_reason: Optional[SkipReason] = None
    ordination: Optional[OrdinationResult] = None

    @property
    def valid(self) -> bool:
        return self.row is not None


def evaluate_grid_point(
    point: GridPoint,
    subset: pd.DataFrame,
    settings: SweepSettings,
    index: int = 0,
) -> GridPointOutcome:
    """
    Validate, ordinate and describe the observations of one grid point.

    Args:
        point: The grid point
        subset: Observations selected for the grid point
        settings: Sweep settings (index columns, NMDS and KDE parameters)
        index: Position of the grid point in iteration order

    Returns:
        GridPointOutcome with a row, or with the reason the point was skipped
    """
    try:
        habitats = check_subset(subset, point)

        ordination = run_ordination(
            subset,
            settings.index_columns,
            seed=settings.seed,
            n_init=settings.n_init,
            max_iter=settings.max_iter,
            eps=settings.eps,
        )
        if not ordination.converged:
            logger.warning(
                f"NMDS did not converge for {point.label()} (stress={ordination.stress:.4f})"
            )

        check_spread(ordination.coordinates, ordination.labels, habitats, point)

        try:
            descriptors = compute_descriptors(
                ordination,
                habitats,
                grid_size=settings.grid_size,
                percentile=settings.percentile,
                extent=settings.kde_extent,
            )
        except np.linalg.LinAlgError as e:
            logger.debug(f"KDE failed for {point.label()}: {e}")
            raise SkippedGridPoint(SkipReason.SINGULAR_DENSITY, point) from e

    except SkippedGridPoint as skip:
        logger.debug(skip.message)
        return GridPointOutcome(index=index, point=point, skip_reason=skip.reason)

    row = DescriptorRow(
        group=point.group,
        fs=point.fs,
        overlap=point.overlap,
        nfft=point.nfft,
        centroid_distance=descriptors.centroid_distance,
        habitat1_dispersion=descriptors.dispersion_a,
        habitat2_dispersion=descriptors.dispersion_b,
        kde_overlap=descriptors.kde_overlap,
        bhattacharyya_coefficient=descriptors.bhattacharyya,
        nmds_stress=ordination.stress,
        nmds_converged=ordination.converged,
    )
    return GridPointOutcome(index=index, point=point, row=row, ordination=ordination)
