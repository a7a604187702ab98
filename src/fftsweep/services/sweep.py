# services/sweep.py
"""
Service for FFT parametrisation descriptor sweeps.
"""

import logging
from collections import Counter
from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pandas as pd

from fftsweep.core.analysis.grid import GridPoint, ParameterGrid
from fftsweep.core.analysis.loader import ObservationSet, load_observations
from fftsweep.core.analysis.pipeline import GridPointOutcome, evaluate_grid_point
from fftsweep.core.analysis.selection import SkipReason, select_subset
from fftsweep.core.config import Config, SweepSettings, get_default_config
from fftsweep.core.domains import get_domain
from fftsweep.core.exceptions import DataLoadError, EmptyResultSet
from fftsweep.core.results import ResultSink
from fftsweep.core.visualize import render_ordination
from fftsweep.models.sweep import GridPreview, GridPreviewEntry, SweepSummary

from .base import BaseService, BatchProgress, ServiceResult

logger = logging.getLogger(__name__)

PlotRenderer = Callable[..., str]

# (grid index, point, subset) for grid points with at least one observation
Task = Tuple[int, GridPoint, pd.DataFrame]


class SweepService(BaseService):
    """
    Service for descriptor sweeps over FFT parametrisations.

    Provides high-level methods for:
    - Running the full sweep and writing the descriptor table
    - Previewing which grid points have matching observations

    Example:
        >>> service = SweepService(load_config("fftsweep.toml"))
        >>> result = service.run("indices.csv", output_dir="results")
        >>> result.data.valid_rows
        42
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        renderer: Optional[PlotRenderer] = render_ordination,
    ) -> None:
        """Initialize the service.

        Args:
            config: Configuration (default: built-in defaults)
            renderer: Plot renderer called for each valid grid point, or None
        """
        super().__init__()
        self.config = config or get_default_config()
        self.renderer = renderer

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self, input_path: str, settings: SweepSettings) -> ObservationSet:
        """Load the index table with the configured domain conventions."""
        return load_observations(
            input_path,
            get_domain(settings.domain),
            index_columns=settings.index_columns,
            dayfirst=bool(self.config.get("data", "dayfirst", False)),
            period_column=self.config.get("data", "period_column", "Period"),
            period_value=self.config.get("data", "period_value", "Night"),
        )

    def _grid(self, observations: ObservationSet, settings: SweepSettings) -> ParameterGrid:
        return ParameterGrid(
            observations.group_keys(),
            settings.sample_rates,
            settings.nfft_values,
            settings.overlaps,
            overlap_tolerance=settings.overlap_tolerance,
        )

    # =========================================================================
    # Sweep
    # =========================================================================

    def run(
        self,
        input_path: str,
        output_dir: Optional[str] = None,
        workers: Optional[int] = None,
        plots: Optional[bool] = None,
    ) -> ServiceResult[SweepSummary]:
        """
        Run the descriptor sweep.

        Args:
            input_path: Acoustic index table (CSV)
            output_dir: Output directory (default: [output] dir)
            workers: Worker processes (default: [batch] workers)
            plots: Render NMDS plots (default: [output] plots)

        Returns:
            Result with the sweep summary. An empty sweep is a successful
            result with ``summary.empty`` set and nothing written.
        """
        start_time = datetime.now()
        output_dir = output_dir or self.config.get("output", "dir", "results")
        workers = workers or int(self.config.get("batch", "workers", 1))
        if plots is None:
            plots = bool(self.config.get("output", "plots", True))
        include_diagnostics = bool(self.config.get("output", "include_diagnostics", False))
        output_path = Path(output_dir) / self.config.get("output", "filename", "descriptors.csv")

        try:
            settings = self.config.to_settings()
            observations = self.load(input_path, settings)
        except DataLoadError as e:
            return ServiceResult.fail(str(e), path=input_path)
        except ValueError as e:
            return ServiceResult.fail(f"Invalid configuration: {e}")

        domain = observations.domain
        grid = self._grid(observations, settings)
        logger.info(
            f"Sweeping {len(grid)} grid points ({len(grid.groups)} groups x "
            f"{len(grid.sample_rates)} FS x {len(grid.nfft_values)} NFFT x "
            f"{len(grid.overlaps)} overlaps)"
        )

        progress = BatchProgress(total=len(grid))
        self._report_progress(progress)

        outcomes: List[GridPointOutcome] = []
        tasks: List[Task] = []
        for index, point in enumerate(grid):
            subset = select_subset(observations, point, settings.overlap_tolerance)
            if subset.empty:
                outcomes.append(GridPointOutcome(index=index, point=point, skip_reason=SkipReason.NO_MATCH))
                progress.completed += 1
            else:
                tasks.append((index, point, subset))
        self._report_progress(progress)

        outcomes.extend(self._evaluate(tasks, settings, workers, progress))
        outcomes.sort(key=lambda o: o.index)

        sink = ResultSink(domain.group_column, include_diagnostics=include_diagnostics)
        skip_counts: Counter = Counter()
        plot_paths: List[str] = []
        for outcome in outcomes:
            if not outcome.valid:
                skip_counts[outcome.skip_reason.value] += 1
                continue
            sink.append(outcome.row)
            if plots and self.renderer is not None:
                plot_paths.append(
                    self.renderer(
                        outcome.ordination,
                        outcome.point,
                        output_dir,
                        habitats=domain.habitats,
                        dpi=int(self.config.get("output", "dpi", 150)),
                    )
                )

        summary = SweepSummary(
            domain=domain.name,
            input_path=str(input_path),
            total_points=len(grid),
            evaluated_points=len(tasks),
            valid_rows=len(sink),
            skip_counts=dict(skip_counts),
            non_converged=sum(1 for r in sink.rows if not r.nmds_converged),
            plot_paths=plot_paths,
        )

        try:
            summary.output_path = sink.persist(output_path)
        except EmptyResultSet as e:
            logger.warning(e.message)
            summary.duration_seconds = (datetime.now() - start_time).total_seconds()
            return ServiceResult.ok(
                data=summary,
                message="No valid results; nothing written",
                warnings=[e.message],
            )

        summary.duration_seconds = (datetime.now() - start_time).total_seconds()
        warnings = []
        if summary.non_converged:
            warnings.append(f"NMDS did not converge for {summary.non_converged} grid point(s)")
        logger.info(
            f"Sweep complete: {summary.valid_rows} rows, {summary.skipped} skipped, "
            f"{summary.duration_seconds:.1f}s"
        )
        return ServiceResult.ok(
            data=summary,
            message=f"Wrote {summary.valid_rows} rows to {summary.output_path}",
            warnings=warnings,
        )

    def _evaluate(
        self,
        tasks: List[Task],
        settings: SweepSettings,
        workers: int,
        progress: BatchProgress,
    ) -> List[GridPointOutcome]:
        """Evaluate grid points sequentially or in a process pool."""
        if workers > 1 and len(tasks) > 1:
            return self._evaluate_parallel(tasks, settings, workers, progress)

        outcomes = []
        for index, point, subset in tasks:
            progress.current_item = point.label()
            outcomes.append(evaluate_grid_point(point, subset, settings, index=index))
            progress.completed += 1
            self._report_progress(progress)
        return outcomes

    def _evaluate_parallel(
        self,
        tasks: List[Task],
        settings: SweepSettings,
        workers: int,
        progress: BatchProgress,
    ) -> List[GridPointOutcome]:
        """Evaluate grid points using ProcessPoolExecutor; completion order is arbitrary."""
        outcomes = []
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(evaluate_grid_point, point, subset, settings, index): point
                for index, point, subset in tasks
            }
            for future in as_completed(futures):
                outcomes.append(future.result())
                progress.current_item = futures[future].label()
                progress.completed += 1
                self._report_progress(progress)
        return outcomes

    # =========================================================================
    # Grid preview
    # =========================================================================

    def preview_grid(self, input_path: str) -> ServiceResult[GridPreview]:
        """
        Count matching observations per grid point without running ordinations.

        Args:
            input_path: Acoustic index table (CSV)

        Returns:
            Result with a GridPreview covering every grid point
        """
        try:
            settings = self.config.to_settings()
            observations = self.load(input_path, settings)
        except DataLoadError as e:
            return ServiceResult.fail(str(e), path=input_path)
        except ValueError as e:
            return ServiceResult.fail(f"Invalid configuration: {e}")

        preview = GridPreview(domain=observations.domain.name)
        for point in self._grid(observations, settings):
            subset = select_subset(observations, point, settings.overlap_tolerance)
            counts = subset["Habitat"].astype(str).value_counts()
            preview.entries.append(
                GridPreviewEntry(
                    group=point.group,
                    fs=point.fs,
                    nfft=point.nfft,
                    overlap=point.overlap,
                    n_observations=len(subset),
                    habitat_counts={h: int(counts.get(h, 0)) for h in observations.domain.habitats},
                )
            )

        return ServiceResult.ok(
            data=preview,
            message=f"{len(preview.matching)} of {preview.total} grid points have observations",
        )
