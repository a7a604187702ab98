"""
Multivariate Separation Descriptors
===================================

Statistics describing how well two habitat cohorts separate in an NMDS
ordination:

- Centroid distance: Euclidean distance between cohort mean coordinates
- Dispersion: mean distance to cohort centroid, from the Manhattan
  dissimilarities the ordination was fit on
- KDE overlap: Jaccard index of the two cohorts' high-density regions
  (cells at or above the 95th percentile of each density grid)
- Bhattacharyya coefficient: sum of sqrt(p * q) over the density grids

Density grids
-------------
Each cohort's density is a product Gaussian kernel estimate with one
bandwidth per NMDS axis: points are scaled by their per-axis sample SD and
fit with scikit-learn's KernelDensity at Scott's factor n^(-1/6). The
estimate is evaluated on a grid_size x grid_size mesh and normalized to sum
to 1. Any cohort with two or more points and non-zero spread on both axes
has a density, collinear cohorts included.

With ``extent="shared"`` (default) both cohorts are evaluated over the
union of their NMDS ranges, so grid cells refer to the same locations.
With ``extent="per_cohort"`` each cohort is evaluated over its own range
and cells are compared by index even though they cover different
locations. That reproduces earlier results computed this way, but the
overlap and Bhattacharyya values are then only approximate.

Dispersion
----------
Distances to the centroid in principal-coordinate space follow directly
from the within-cohort dissimilarities d:

    z_i^2 = mean_j d_ij^2 - 0.5 * mean_jk d_jk^2

Negative values (possible for non-Euclidean dissimilarities such as
Manhattan) are clipped to zero before the square root.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from sklearn.neighbors import KernelDensity

from fftsweep.core.analysis.ordination import OrdinationResult

logger = logging.getLogger(__name__)

__all__ = [
    "Descriptors",
    "centroid_distance",
    "dispersion",
    "density_grid",
    "density_grids",
    "contour_overlap",
    "bhattacharyya",
    "compute_descriptors",
]


@dataclass
class Descriptors:
    """Separation descriptors for one grid point."""

    centroid_distance: float
    dispersion_a: float
    dispersion_b: float
    kde_overlap: float
    bhattacharyya: float


def centroid_distance(cohort_a: np.ndarray, cohort_b: np.ndarray) -> float:
    """Euclidean distance between the mean coordinates of two cohorts."""
    return float(np.linalg.norm(cohort_a.mean(axis=0) - cohort_b.mean(axis=0)))


def distances_to_centroid(dissimilarity: np.ndarray) -> np.ndarray:
    """Distance of each member to the group centroid, from a within-group dissimilarity matrix."""
    d2 = np.asarray(dissimilarity, dtype=float) ** 2
    z2 = d2.mean(axis=1) - 0.5 * d2.mean()
    return np.sqrt(np.clip(z2, 0.0, None))


def dispersion(dissimilarity: np.ndarray, labels: np.ndarray, habitat: str) -> float:
    """Mean distance to centroid for one habitat cohort."""
    members = np.flatnonzero(labels == habitat)
    within = dissimilarity[np.ix_(members, members)]
    return float(distances_to_centroid(within).mean())


def _mesh(x_range: Tuple[float, float], y_range: Tuple[float, float], grid_size: int) -> np.ndarray:
    xx, yy = np.meshgrid(
        np.linspace(x_range[0], x_range[1], grid_size),
        np.linspace(y_range[0], y_range[1], grid_size),
    )
    return np.vstack([xx.ravel(), yy.ravel()])


def _range(*cohorts: np.ndarray) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    points = np.vstack(cohorts)
    return (
        (float(points[:, 0].min()), float(points[:, 0].max())),
        (float(points[:, 1].min()), float(points[:, 1].max())),
    )


def density_grid(
    cohort: np.ndarray,
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
    grid_size: int = 100,
) -> np.ndarray:
    """
    Product-kernel Gaussian KDE of a cohort on a regular mesh, normalized to sum to 1.

    Raises:
        np.linalg.LinAlgError: If the cohort has no spread on an axis
    """
    n_samples, n_dims = cohort.shape
    if n_samples < 2:
        raise np.linalg.LinAlgError("Density needs at least two points")

    center = cohort.mean(axis=0)
    scale = cohort.std(axis=0, ddof=1)
    if not np.all(np.isfinite(scale)) or np.any(scale <= 0):
        raise np.linalg.LinAlgError("Cohort has no spread on an NMDS axis")

    kde = KernelDensity(kernel="gaussian", bandwidth=n_samples ** (-1.0 / (n_dims + 4)))
    kde.fit((cohort - center) / scale)

    mesh = (_mesh(x_range, y_range, grid_size).T - center) / scale
    density = np.exp(kde.score_samples(mesh)).reshape(grid_size, grid_size)
    total = density.sum()
    if not np.isfinite(total) or total <= 0:
        raise np.linalg.LinAlgError("Density grid has no mass")
    return density / total


def density_grids(
    cohort_a: np.ndarray,
    cohort_b: np.ndarray,
    grid_size: int = 100,
    extent: str = "shared",
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Normalized density grids for two cohorts.

    Args:
        cohort_a: (n, 2) coordinates of the first cohort
        cohort_b: (m, 2) coordinates of the second cohort
        grid_size: Cells per axis
        extent: "shared" (union of both ranges) or "per_cohort"

    Returns:
        Tuple of two (grid_size, grid_size) arrays, each summing to 1
    """
    if extent == "shared":
        x_range, y_range = _range(cohort_a, cohort_b)
        return (
            density_grid(cohort_a, x_range, y_range, grid_size),
            density_grid(cohort_b, x_range, y_range, grid_size),
        )
    if extent == "per_cohort":
        return (
            density_grid(cohort_a, *_range(cohort_a), grid_size),
            density_grid(cohort_b, *_range(cohort_b), grid_size),
        )
    raise ValueError(f"Invalid KDE extent: {extent}. Must be 'shared' or 'per_cohort'")


def high_density_mask(density: np.ndarray, percentile: float = 95.0) -> np.ndarray:
    """Cells at or above the given percentile of the grid values."""
    return density >= np.percentile(density, percentile)


def contour_overlap(density_a: np.ndarray, density_b: np.ndarray, percentile: float = 95.0) -> float:
    """Jaccard index of the two cohorts' high-density masks."""
    mask_a = high_density_mask(density_a, percentile)
    mask_b = high_density_mask(density_b, percentile)
    union = np.logical_or(mask_a, mask_b).sum()
    if union == 0:
        return 0.0
    return float(np.logical_and(mask_a, mask_b).sum() / union)


def bhattacharyya(density_a: np.ndarray, density_b: np.ndarray) -> float:
    """Bhattacharyya coefficient of two normalized density grids."""
    with np.errstate(invalid="ignore"):
        products = np.sqrt(density_a * density_b)
    return float(np.nansum(products))


def compute_descriptors(
    ordination: OrdinationResult,
    habitats: Tuple[str, str],
    grid_size: int = 100,
    percentile: float = 95.0,
    extent: str = "shared",
) -> Descriptors:
    """
    All separation descriptors for one ordination.

    Args:
        ordination: NMDS result for a valid grid point
        habitats: (cohort A, cohort B) habitat labels
        grid_size: KDE cells per axis
        percentile: Density percentile defining the high-density region
        extent: KDE grid extent, "shared" or "per_cohort"

    Raises:
        np.linalg.LinAlgError: If a cohort has no density (no spread on an axis)
    """
    habitat_a, habitat_b = habitats
    cohort_a = ordination.cohort(habitat_a)
    cohort_b = ordination.cohort(habitat_b)

    density_a, density_b = density_grids(cohort_a, cohort_b, grid_size=grid_size, extent=extent)

    return Descriptors(
        centroid_distance=centroid_distance(cohort_a, cohort_b),
        dispersion_a=dispersion(ordination.dissimilarity, ordination.labels, habitat_a),
        dispersion_b=dispersion(ordination.dissimilarity, ordination.labels, habitat_b),
        kde_overlap=contour_overlap(density_a, density_b, percentile),
        bhattacharyya=bhattacharyya(density_a, density_b),
    )
