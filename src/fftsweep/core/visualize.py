"""
NMDS Plot Rendering
===================

One scatter plot per valid grid point, colored by habitat with cohort
centroids marked. Plots are stored as

    {output_root}/{group}/NMDS_FS_{fs}_NFFT_{nfft}_Overlap_{overlap:.2f}.png

The interactive viewer locates images by this exact name from the
parameter values a user selects, so the naming scheme must not change.
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from fftsweep.core.analysis.grid import GridPoint
from fftsweep.core.analysis.ordination import OrdinationResult

HABITAT_COLORS = ("#2A9D8F", "#E76F51")


def _format_number(value: Union[int, float]) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:g}"


def plot_filename(fs: Union[int, float], nfft: Union[int, float], overlap: float) -> str:
    """File name of the NMDS plot for one parametrisation."""
    return f"NMDS_FS_{_format_number(fs)}_NFFT_{_format_number(nfft)}_Overlap_{overlap:.2f}.png"


def plot_path(
    output_root: Union[str, Path],
    group: str,
    fs: Union[int, float],
    nfft: Union[int, float],
    overlap: float,
) -> Path:
    """Full path of the NMDS plot for one grid point."""
    return Path(output_root) / str(group) / plot_filename(fs, nfft, overlap)


def find_plot(
    output_root: Union[str, Path],
    group: str,
    fs: Union[int, float],
    nfft: Union[int, float],
    overlap: float,
) -> Optional[Path]:
    """Path of an existing plot for the given parameters, or None."""
    path = plot_path(output_root, group, fs, nfft, overlap)
    return path if path.exists() else None


def render_ordination(
    ordination: OrdinationResult,
    point: GridPoint,
    output_root: Union[str, Path],
    habitats: Optional[Sequence[str]] = None,
    figsize: Tuple[float, float] = (7, 6),
    dpi: int = 150,
) -> str:
    """
    Save an NMDS scatter plot for one grid point.

    Args:
        ordination: NMDS result of the grid point
        point: The grid point (determines the file name)
        output_root: Root directory for plots
        habitats: Habitat order for colors and legend (default: order of appearance)
        figsize: Figure size in inches
        dpi: Resolution of the saved image

    Returns:
        Path to the saved image
    """
    import matplotlib.pyplot as plt

    if habitats is None:
        habitats = list(dict.fromkeys(ordination.labels.tolist()))

    fig, ax = plt.subplots(figsize=figsize)

    for habitat, color in zip(habitats, HABITAT_COLORS):
        cohort = ordination.cohort(habitat)
        if len(cohort) == 0:
            continue
        ax.scatter(cohort[:, 0], cohort[:, 1], s=40, alpha=0.75, color=color, label=habitat)
        centroid = cohort.mean(axis=0)
        ax.scatter(*centroid, s=160, marker="X", color=color, edgecolor="black", linewidth=0.8)

    ax.axhline(y=0, color="gray", linestyle="--", alpha=0.3)
    ax.axvline(x=0, color="gray", linestyle="--", alpha=0.3)
    ax.set_xlabel("NMDS1")
    ax.set_ylabel("NMDS2")
    stress = "" if np.isnan(ordination.stress) else f", stress={ordination.stress:.3f}"
    ax.set_title(
        f"{point.group}: FS {_format_number(point.fs)} Hz, NFFT {point.nfft}, "
        f"overlap {point.overlap:.2f}{stress}"
    )
    ax.grid(True, alpha=0.3)
    ax.legend(title="Habitat")
    plt.tight_layout()

    output_path = plot_path(output_root, point.group, point.fs, point.nfft, point.overlap)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=dpi, bbox_inches="tight", format="png")
    finally:
        plt.close(fig)

    return str(output_path)
