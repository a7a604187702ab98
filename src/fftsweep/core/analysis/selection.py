"""
Grid Point Selection and Validity Checks
========================================

Selects the observations recorded with one grid point's parametrisation
and decides whether the subset can support the descriptor statistics.
Failed checks raise SkippedGridPoint; the sweep treats that as "no row
for this grid point", never as an error.

Checks, in order:
1. at least 2 observations
2. at least 2 habitats
3. at least 2 observations in each habitat cohort
4. non-zero, defined standard deviation on both NMDS axes in each cohort
"""

from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from fftsweep.core.analysis.grid import GridPoint
from fftsweep.core.analysis.loader import GROUP_KEY, ObservationSet
from fftsweep.core.exceptions import SkippedGridPoint

MIN_OBSERVATIONS = 2
MIN_COHORT_SIZE = 2


class SkipReason(str, Enum):
    """Why a grid point produced no descriptor row."""

    NO_MATCH = "no_match"
    TOO_FEW_OBSERVATIONS = "too_few_observations"
    SINGLE_HABITAT = "single_habitat"
    COHORT_TOO_SMALL = "cohort_too_small"
    DEGENERATE_SPREAD = "degenerate_spread"
    SINGULAR_DENSITY = "singular_density"


def select_subset(
    observations: ObservationSet,
    point: GridPoint,
    tolerance: float = 1e-6,
) -> pd.DataFrame:
    """
    Rows matching a grid point's group, sampling rate, FFT length and overlap.

    Overlap is matched within ``tolerance`` so configured values such as
    0.70000001 still select rows recorded as 0.7.
    """
    df = observations.frame
    mask = (
        (df[GROUP_KEY] == point.group)
        & (df["FS"] == point.fs)
        & (df["NFFT"] == point.nfft)
        & ((df["Overlap"] - point.overlap).abs() <= tolerance)
    )
    return df[mask].copy()


def cohort_labels(subset: pd.DataFrame) -> List[str]:
    """Habitats present in the subset, in reporting order (reference first)."""
    habitat = subset["Habitat"]
    if isinstance(habitat.dtype, pd.CategoricalDtype):
        counts = habitat.value_counts(sort=False)
        return [str(h) for h, n in counts.items() if n > 0]
    return sorted(habitat.astype(str).unique().tolist())


def check_subset(subset: pd.DataFrame, point: Optional[GridPoint] = None) -> Tuple[str, str]:
    """
    Apply the size checks that do not need an ordination.

    Returns:
        The two cohort habitats, reference first

    Raises:
        SkippedGridPoint: If the subset is too small or has a single habitat
    """
    if len(subset) < MIN_OBSERVATIONS:
        reason = SkipReason.NO_MATCH if len(subset) == 0 else SkipReason.TOO_FEW_OBSERVATIONS
        raise SkippedGridPoint(reason, point)

    habitats = cohort_labels(subset)
    if len(habitats) < 2:
        raise SkippedGridPoint(SkipReason.SINGLE_HABITAT, point)

    # Cohort sizes do not depend on the ordination, so this check runs early.
    sizes = subset["Habitat"].astype(str).value_counts()
    if any(sizes.get(h, 0) < MIN_COHORT_SIZE for h in habitats[:2]):
        raise SkippedGridPoint(SkipReason.COHORT_TOO_SMALL, point)

    return habitats[0], habitats[1]


def _spread_ok(values: np.ndarray) -> bool:
    values = values[~np.isnan(values)]
    if len(values) < 2:
        return False
    sd = np.std(values, ddof=1)
    return bool(np.isfinite(sd) and sd > 0)


def check_spread(
    coordinates: np.ndarray,
    labels: np.ndarray,
    habitats: Tuple[str, str],
    point: Optional[GridPoint] = None,
) -> None:
    """
    Require spread on both ordination axes within each cohort.

    Args:
        coordinates: (n, 2) NMDS coordinates
        labels: Habitat label per row
        habitats: The two cohort habitats

    Raises:
        SkippedGridPoint: If a cohort's SD on NMDS1 or NMDS2 is undefined or zero
    """
    for habitat in habitats:
        cohort = coordinates[labels == habitat]
        if len(cohort) < MIN_COHORT_SIZE:
            raise SkippedGridPoint(SkipReason.COHORT_TOO_SMALL, point)
        if not (_spread_ok(cohort[:, 0]) and _spread_ok(cohort[:, 1])):
            raise SkippedGridPoint(SkipReason.DEGENERATE_SPREAD, point)
