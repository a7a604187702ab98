"""
Analysis Package
================

Descriptor pipeline for FFT parametrisation sweeps:
- Index table loading and grouping (night / dawn-dusk chorus)
- Parameter grid enumeration
- Grid point selection and validity checks
- NMDS ordination of standardized acoustic indices
- Separation descriptors (centroid distance, dispersion, KDE overlap,
  Bhattacharyya coefficient)
"""

from fftsweep.core.analysis.descriptors import (
    Descriptors,
    bhattacharyya,
    centroid_distance,
    compute_descriptors,
    contour_overlap,
    density_grids,
    dispersion,
)
from fftsweep.core.analysis.grid import GridPoint, ParameterGrid
from fftsweep.core.analysis.loader import ObservationSet, load_observations
from fftsweep.core.analysis.ordination import OrdinationResult, run_ordination
from fftsweep.core.analysis.pipeline import DescriptorRow, GridPointOutcome, evaluate_grid_point
from fftsweep.core.analysis.selection import SkipReason, check_spread, check_subset, select_subset

__all__ = [
    # loader
    "ObservationSet",
    "load_observations",
    # grid
    "GridPoint",
    "ParameterGrid",
    # selection
    "SkipReason",
    "select_subset",
    "check_subset",
    "check_spread",
    # ordination
    "OrdinationResult",
    "run_ordination",
    # descriptors
    "Descriptors",
    "centroid_distance",
    "dispersion",
    "density_grids",
    "contour_overlap",
    "bhattacharyya",
    "compute_descriptors",
    # pipeline
    "DescriptorRow",
    "GridPointOutcome",
    "evaluate_grid_point",
]
