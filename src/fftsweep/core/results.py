"""
Descriptor Table Persistence
============================

Rows are collected in memory during a sweep and written once, after the
sweep is complete. The file is written to a temporary name in the target
directory and moved into place, so an interrupted run never leaves a
partial table behind.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

import pandas as pd

from fftsweep.core.analysis.pipeline import DescriptorRow
from fftsweep.core.exceptions import EmptyResultSet

logger = logging.getLogger(__name__)

DESCRIPTOR_COLUMNS = [
    "FS",
    "Overlap",
    "NFFT",
    "Centroid_Distance",
    "Habitat1_Dispersion",
    "Habitat2_Dispersion",
    "KDE_Overlap",
    "Bhattacharyya_Coefficient",
]
DIAGNOSTIC_COLUMNS = ["NMDS_Stress", "NMDS_Converged"]


def output_columns(group_column: str, include_diagnostics: bool = False) -> List[str]:
    """Column order of the descriptor table."""
    columns = [group_column, *DESCRIPTOR_COLUMNS]
    if include_diagnostics:
        columns.extend(DIAGNOSTIC_COLUMNS)
    return columns


class ResultSink:
    """
    Append-only collection of descriptor rows.

    Example:
        >>> sink = ResultSink(group_column="Night")
        >>> sink.append(row)
        >>> sink.persist("results/descriptors.csv")
    """

    def __init__(self, group_column: str, include_diagnostics: bool = False) -> None:
        self.group_column = group_column
        self.include_diagnostics = include_diagnostics
        self._rows: List[DescriptorRow] = []

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> List[DescriptorRow]:
        return list(self._rows)

    def append(self, row: DescriptorRow) -> None:
        self._rows.append(row)

    def to_frame(self) -> pd.DataFrame:
        """Collected rows as a DataFrame in output column order."""
        records = [r.to_record(self.group_column, self.include_diagnostics) for r in self._rows]
        return pd.DataFrame.from_records(
            records, columns=output_columns(self.group_column, self.include_diagnostics)
        )

    def persist(self, output_path: Union[str, Path]) -> str:
        """
        Write the collected rows as CSV.

        Args:
            output_path: Destination file

        Returns:
            Path of the written file

        Raises:
            EmptyResultSet: If no rows were collected; nothing is written
        """
        if not self._rows:
            raise EmptyResultSet()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                self.to_frame().to_csv(f, index=False)
            os.replace(tmp_name, output_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"Wrote {len(self._rows)} descriptor rows to {output_path}")
        return str(output_path)
