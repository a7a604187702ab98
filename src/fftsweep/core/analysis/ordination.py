"""
NMDS Ordination
===============

Embeds a subset of observations in two dimensions:

1. standardize each acoustic index column (zero mean, unit sample SD)
2. compute pairwise Manhattan distances between standardized rows
3. run non-metric multidimensional scaling on the precomputed distances

Standardization uses the sample standard deviation (ddof=1), matching R's
``scale()``. Manhattan distances scale linearly with the SD convention,
so the choice only changes dispersion values by a constant factor; NMDS
itself depends only on the rank order of distances.

NMDS uses scikit-learn's SMACOF implementation with a fixed seed and a
small number of restarts. When the best restart stops at ``max_iter`` the
result is still returned, flagged as not converged.

Example:
    >>> from fftsweep.core.analysis.ordination import run_ordination
    >>> result = run_ordination(subset, ["H", "ACI", "AEI", "ADI", "NDSI"])
    >>> result.coordinates.shape
    (24, 2)
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.manifold import MDS
from sklearn.metrics import pairwise_distances

from fftsweep.core.exceptions import warn_non_convergence

logger = logging.getLogger(__name__)

__all__ = [
    "OrdinationResult",
    "standardize",
    "manhattan_dissimilarity",
    "run_nmds",
    "run_ordination",
]


@dataclass
class OrdinationResult:
    """
    NMDS embedding of one grid point's observations.

    Attributes:
        coordinates: (n, 2) array of NMDS1, NMDS2
        labels: Habitat label per row
        dissimilarity: (n, n) Manhattan dissimilarity matrix the NMDS was fit on
        stress: Stress of the best NMDS run
        n_iter: Iterations used by the best run
        converged: False if the best run stopped at max_iter
    """

    coordinates: np.ndarray
    labels: np.ndarray
    dissimilarity: np.ndarray
    stress: float = float("nan")
    n_iter: int = 0
    converged: bool = True

    def to_frame(self) -> pd.DataFrame:
        """Coordinates as a DataFrame with NMDS1, NMDS2 and Habitat columns."""
        return pd.DataFrame(
            {
                "NMDS1": self.coordinates[:, 0],
                "NMDS2": self.coordinates[:, 1],
                "Habitat": self.labels,
            }
        )

    def cohort(self, habitat: str) -> np.ndarray:
        """Coordinates of one habitat cohort."""
        return self.coordinates[self.labels == habitat]


def standardize(values: np.ndarray) -> np.ndarray:
    """
    Center each column and scale it to unit sample standard deviation.

    Columns that are constant within the subset carry no information and
    are set to zero instead of NaN.
    """
    values = np.asarray(values, dtype=float)
    centered = values - values.mean(axis=0)
    sd = values.std(axis=0, ddof=1) if len(values) > 1 else np.zeros(values.shape[1])
    constant = ~(sd > 0)
    if constant.any():
        logger.debug(f"{int(constant.sum())} index column(s) constant within subset")
    scale = np.where(constant, 1.0, sd)
    scaled = centered / scale
    scaled[:, constant] = 0.0
    return scaled


def manhattan_dissimilarity(values: np.ndarray) -> np.ndarray:
    """Symmetric matrix of pairwise L1 distances between rows."""
    return pairwise_distances(values, metric="manhattan")


def run_nmds(
    dissimilarity: np.ndarray,
    n_components: int = 2,
    seed: int = 42,
    n_init: int = 2,
    max_iter: int = 300,
    eps: float = 1e-3,
):
    """
    Non-metric MDS of a precomputed dissimilarity matrix.

    Returns:
        Tuple of (coordinates, stress, n_iter, converged)
    """
    nmds = MDS(
        n_components=n_components,
        metric=False,
        dissimilarity="precomputed",
        random_state=seed,
        n_init=n_init,
        max_iter=max_iter,
        eps=eps,
    )
    coordinates = nmds.fit_transform(dissimilarity)
    stress = float(nmds.stress_)
    n_iter = int(getattr(nmds, "n_iter_", 0))
    converged = n_iter < max_iter
    if not converged:
        warn_non_convergence(stress, n_iter, max_iter)
    return coordinates, stress, n_iter, converged


def run_ordination(
    subset: pd.DataFrame,
    index_columns: Sequence[str],
    seed: int = 42,
    n_init: int = 2,
    max_iter: int = 300,
    eps: float = 1e-3,
) -> OrdinationResult:
    """
    Standardize, compute Manhattan dissimilarities and run NMDS for a subset.

    Args:
        subset: Observations of one grid point (needs Habitat and index columns)
        index_columns: Acoustic index columns to ordinate
        seed: Random seed for NMDS initialisation
        n_init: Number of NMDS restarts
        max_iter: Maximum SMACOF iterations per restart
        eps: SMACOF convergence tolerance

    Returns:
        OrdinationResult with coordinates in subset row order
    """
    values = standardize(subset[list(index_columns)].to_numpy(dtype=float))
    dissimilarity = manhattan_dissimilarity(values)
    coordinates, stress, n_iter, converged = run_nmds(
        dissimilarity, seed=seed, n_init=n_init, max_iter=max_iter, eps=eps
    )
    return OrdinationResult(
        coordinates=coordinates,
        labels=subset["Habitat"].astype(str).to_numpy(),
        dissimilarity=dissimilarity,
        stress=stress,
        n_iter=n_iter,
        converged=converged,
    )
