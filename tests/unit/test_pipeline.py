"""
Unit tests for fftsweep.core.analysis.pipeline module.
"""

import math

import numpy as np
import pytest

from fftsweep.core.analysis.descriptors import dispersion
from fftsweep.core.analysis.grid import GridPoint
from fftsweep.core.analysis.loader import prepare_observations
from fftsweep.core.analysis.pipeline import DescriptorRow, evaluate_grid_point
from fftsweep.core.analysis.selection import SkipReason, select_subset
from fftsweep.core.config import SweepSettings
from fftsweep.core.domains import UNDERWATER

POINT = GridPoint("2023-03-14", 48000, 512, 0.5)


@pytest.fixture
def settings():
    return SweepSettings(grid_size=40)


@pytest.fixture
def subset(index_table):
    return select_subset(prepare_observations(index_table, UNDERWATER), POINT)


class TestEvaluateGridPoint:
    """Tests for evaluating a single grid point."""

    def test_valid_row(self, subset, settings):
        outcome = evaluate_grid_point(POINT, subset, settings, index=3)

        assert outcome.valid
        assert outcome.index == 3
        assert outcome.skip_reason is None
        assert outcome.ordination is not None

        row = outcome.row
        assert (row.group, row.fs, row.nfft, row.overlap) == ("2023-03-14", 48000, 512, 0.5)
        assert row.centroid_distance > 0
        assert row.habitat1_dispersion > 0
        assert row.habitat2_dispersion > 0
        assert 0.0 <= row.kde_overlap <= 1.0
        assert 0.0 <= row.bhattacharyya_coefficient <= 1.0 + 1e-9

    def test_deterministic(self, subset, settings):
        """Test repeated evaluation yields identical rows."""
        first = evaluate_grid_point(POINT, subset, settings)
        second = evaluate_grid_point(POINT, subset, settings)

        assert first.row == second.row

    def test_dispersion_independent_of_row_order(self, subset, settings):
        """Test dispersions come from the dissimilarities, not the NMDS start."""
        forward = evaluate_grid_point(POINT, subset, settings).row
        reverse = evaluate_grid_point(POINT, subset.iloc[::-1], settings).row

        assert reverse.habitat1_dispersion == pytest.approx(forward.habitat1_dispersion)
        assert reverse.habitat2_dispersion == pytest.approx(forward.habitat2_dispersion)

    def test_reference_habitat_is_habitat1(self, subset, settings):
        """Test Habitat1 dispersion belongs to the reference habitat."""
        outcome = evaluate_grid_point(POINT, subset, settings)
        ordination = outcome.ordination

        expected = dispersion(ordination.dissimilarity, ordination.labels, "Pocillopora")
        assert outcome.row.habitat1_dispersion == pytest.approx(expected)

    def test_single_observation_cohort_skipped(self, subset, settings):
        subset = subset[(subset["Habitat"] == "Pocillopora") | (subset.index == subset.index[-1])]

        outcome = evaluate_grid_point(POINT, subset, settings)

        assert not outcome.valid
        assert outcome.row is None
        assert outcome.skip_reason is SkipReason.COHORT_TOO_SMALL

    def test_single_habitat_skipped(self, subset, settings):
        outcome = evaluate_grid_point(POINT, subset[subset["Habitat"] == "Non-Pocillopora"], settings)

        assert outcome.skip_reason is SkipReason.SINGLE_HABITAT

    def test_one_row_skipped(self, subset, settings):
        outcome = evaluate_grid_point(POINT, subset.head(1), settings)

        assert outcome.skip_reason is SkipReason.TOO_FEW_OBSERVATIONS

    def test_singular_density_skipped(self, subset, settings, mocker):
        """Test a numerical KDE failure skips the grid point."""
        mocker.patch(
            "fftsweep.core.analysis.pipeline.compute_descriptors",
            side_effect=np.linalg.LinAlgError("Density grid has no mass"),
        )

        outcome = evaluate_grid_point(POINT, subset, settings)

        assert outcome.skip_reason is SkipReason.SINGULAR_DENSITY

    def test_two_member_cohorts_yield_row(self, make_index_table, settings):
        """Test two observations per habitat with spread on both axes give a row."""
        raw = make_index_table(n_per_habitat=2, shift=3.0)
        small = select_subset(prepare_observations(raw, UNDERWATER), POINT)

        outcome = evaluate_grid_point(POINT, small, settings)

        assert outcome.valid, outcome.skip_reason
        assert 0.0 <= outcome.row.kde_overlap <= 1.0
        assert 0.0 <= outcome.row.bhattacharyya_coefficient <= 1.0 + 1e-9


class TestDescriptorRow:
    """Tests for output records."""

    def _row(self, **kwargs):
        values = dict(
            group="2023-03-14", fs=48000, overlap=0.5, nfft=512, centroid_distance=1.0,
            habitat1_dispersion=0.4, habitat2_dispersion=0.6, kde_overlap=0.2,
            bhattacharyya_coefficient=0.3,
        )
        values.update(kwargs)
        return DescriptorRow(**values)

    def test_to_record(self):
        record = self._row().to_record("Night")

        assert list(record) == [
            "Night", "FS", "Overlap", "NFFT", "Centroid_Distance", "Habitat1_Dispersion",
            "Habitat2_Dispersion", "KDE_Overlap", "Bhattacharyya_Coefficient",
        ]
        assert record["Night"] == "2023-03-14"

    def test_to_record_with_diagnostics(self):
        record = self._row(nmds_stress=0.12, nmds_converged=False).to_record("Chorus", include_diagnostics=True)

        assert record["NMDS_Stress"] == 0.12
        assert record["NMDS_Converged"] is False

    def test_default_stress_is_nan(self):
        assert math.isnan(self._row().nmds_stress)
