"""
Exception Classes for the Descriptor Sweep

This module defines the error taxonomy of the sweep. Only DataLoadError is
fatal: it aborts a run before any grid point is evaluated. The remaining
conditions are expected outcomes of sweeping a sparse parameter grid and
are handled where they occur.
"""

import warnings
from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from fftsweep.core.analysis.grid import GridPoint


class FftSweepError(Exception):
    """
    Base class for fftsweep errors.

    Attributes:
        message (str): Explanation of the error
    """

    def __init__(self, message: str = "An fftsweep error occurred.") -> None:
        super().__init__(message)
        self.message = message


class DataLoadError(FftSweepError):
    """
    Exception raised when the acoustic index table cannot be loaded.

    Raised when the input path does not exist, the file cannot be parsed as
    delimited text, or required columns are absent.

    Attributes:
        message (str): Explanation of the error
        path (Optional[str]): The input path that failed to load
        missing_columns (List[str]): Required columns absent from the header
    """

    def __init__(
        self,
        message: str = "Failed to load acoustic index data.",
        path: Optional[str] = None,
        missing_columns: Optional[List[str]] = None,
    ) -> None:
        full_message = message
        if path:
            full_message = f"{full_message} Path: {path}"
        if missing_columns:
            full_message = f"{full_message} Missing columns: {', '.join(missing_columns)}"

        super().__init__(full_message)
        self.message = message
        self.path = path
        self.missing_columns = list(missing_columns or [])


class SkippedGridPoint(FftSweepError):
    """
    Raised when a grid point fails a validity check.

    This is a control-flow signal, not a failure: the sweep catches it and
    records that the grid point contributes no output row.

    Attributes:
        reason: The SkipReason describing which check failed
        point (Optional[GridPoint]): The grid point that was skipped
    """

    def __init__(self, reason: Any, point: Optional["GridPoint"] = None) -> None:
        label = getattr(reason, "value", reason)
        message = f"Grid point skipped: {label}"
        if point is not None:
            message = f"{message} ({point.label()})"
        super().__init__(message)
        self.reason = reason
        self.point = point


class OrdinationNonConvergence(UserWarning):
    """
    Warning emitted when NMDS did not converge within its restart budget.

    The best available configuration is still used; the descriptor row is
    flagged as not converged.
    """


class EmptyResultSet(FftSweepError):
    """
    Raised by the result sink when a sweep produced no valid rows.

    Nothing is written to disk in this case.
    """

    def __init__(self, message: str = "No valid results: every grid point was skipped.") -> None:
        super().__init__(message)


def warn_non_convergence(stress: float, n_iter: int, max_iter: int) -> None:
    """Emit an OrdinationNonConvergence warning."""
    warnings.warn(
        f"NMDS did not converge in {max_iter} iterations "
        f"(best run used {n_iter}, stress={stress:.4f})",
        OrdinationNonConvergence,
        stacklevel=3,
    )
