"""
FFT Parameter Grid
==================

The sweep visits the Cartesian product of grouping key, sampling rate,
FFT length and window overlap. Iteration order is fixed (group outermost,
overlap innermost) and determines output row order.
"""

import itertools
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Union

Number = Union[int, float]


@dataclass(frozen=True)
class GridPoint:
    """One combination of grouping key and FFT parametrisation."""

    group: str
    fs: Number
    nfft: int
    overlap: float

    def label(self) -> str:
        return f"{self.group} FS={self.fs} NFFT={self.nfft} Overlap={self.overlap:.2f}"


def unique_within(values: Iterable[float], tolerance: float) -> List[float]:
    """
    Drop values equal (within tolerance) to an earlier value, keeping order.

    >>> unique_within([0.5, 0.50000001, 0.7], 1e-6)
    [0.5, 0.7]
    """
    kept: List[float] = []
    for value in values:
        if not any(abs(value - k) <= tolerance for k in kept):
            kept.append(value)
    return kept


def _unique(values: Iterable) -> list:
    return list(dict.fromkeys(values))


class ParameterGrid:
    """
    Cartesian product of the configured sweep values.

    Group keys come from the loaded data; sampling rates, FFT lengths and
    overlaps come from configuration. Duplicates are removed (overlaps
    within ``overlap_tolerance`` of each other count as one value).

    Example:
        >>> grid = ParameterGrid(["n1"], [48000], [256, 512], [0.5])
        >>> [p.nfft for p in grid]
        [256, 512]
    """

    def __init__(
        self,
        groups: Sequence[str],
        sample_rates: Sequence[Number],
        nfft_values: Sequence[int],
        overlaps: Sequence[float],
        overlap_tolerance: float = 1e-6,
    ) -> None:
        self.groups = _unique(groups)
        self.sample_rates = _unique(sample_rates)
        self.nfft_values = _unique(nfft_values)
        self.overlaps = unique_within(overlaps, overlap_tolerance)
        self.overlap_tolerance = overlap_tolerance

    def __iter__(self) -> Iterator[GridPoint]:
        for group, fs, nfft, overlap in itertools.product(
            self.groups, self.sample_rates, self.nfft_values, self.overlaps
        ):
            yield GridPoint(group=group, fs=fs, nfft=nfft, overlap=overlap)

    def __len__(self) -> int:
        return len(self.groups) * len(self.sample_rates) * len(self.nfft_values) * len(self.overlaps)

    def points(self) -> List[GridPoint]:
        """All grid points in iteration order."""
        return list(self)
