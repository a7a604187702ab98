"""
Unit tests for fftsweep.core.analysis.ordination module.
"""

import numpy as np
import pytest

from fftsweep.core.analysis.loader import prepare_observations
from fftsweep.core.analysis.ordination import (
    manhattan_dissimilarity,
    run_nmds,
    run_ordination,
    standardize,
)
from fftsweep.core.domains import UNDERWATER
from fftsweep.core.exceptions import OrdinationNonConvergence

INDEX_COLUMNS = ["H", "ACI", "AEI", "ADI", "NDSI"]


@pytest.fixture
def subset(index_table):
    return prepare_observations(index_table, UNDERWATER).frame


class TestStandardize:
    """Tests for column standardization."""

    def test_zero_mean_unit_sd(self):
        rng = np.random.default_rng(1)
        values = rng.normal(loc=[10, -3, 0.5], scale=[2, 0.1, 5], size=(50, 3))

        scaled = standardize(values)

        np.testing.assert_allclose(scaled.mean(axis=0), 0.0, atol=1e-12)
        np.testing.assert_allclose(scaled.std(axis=0, ddof=1), 1.0)

    def test_constant_column_is_zero(self):
        """Test a constant column does not produce NaN."""
        values = np.array([[1.0, 5.0], [2.0, 5.0], [3.0, 5.0]])

        scaled = standardize(values)

        assert not np.isnan(scaled).any()
        assert (scaled[:, 1] == 0.0).all()


class TestDissimilarity:
    def test_manhattan(self):
        values = np.array([[0.0, 0.0], [1.0, 2.0], [-1.0, 1.0]])

        d = manhattan_dissimilarity(values)

        assert d[0, 1] == pytest.approx(3.0)
        assert d[1, 2] == pytest.approx(3.0)
        assert d[0, 2] == pytest.approx(2.0)

    def test_symmetric_zero_diagonal(self):
        rng = np.random.default_rng(2)
        d = manhattan_dissimilarity(rng.normal(size=(12, 5)))

        np.testing.assert_allclose(d, d.T)
        np.testing.assert_allclose(np.diag(d), 0.0)
        assert (d >= 0).all()


class TestRunOrdination:
    """Tests for NMDS ordination of a subset."""

    def test_shapes(self, subset):
        result = run_ordination(subset, INDEX_COLUMNS)

        assert result.coordinates.shape == (16, 2)
        assert result.dissimilarity.shape == (16, 16)
        assert result.labels.tolist() == subset["Habitat"].astype(str).tolist()
        assert np.isfinite(result.stress)

    def test_deterministic(self, subset):
        """Test the same seed yields identical coordinates."""
        first = run_ordination(subset, INDEX_COLUMNS, seed=7)
        second = run_ordination(subset, INDEX_COLUMNS, seed=7)

        np.testing.assert_array_equal(first.coordinates, second.coordinates)
        assert first.stress == second.stress

    def test_cohorts_separate(self, subset):
        """Test well separated cohorts stay apart in the embedding."""
        result = run_ordination(subset, INDEX_COLUMNS)
        a = result.cohort("Pocillopora")
        b = result.cohort("Non-Pocillopora")

        between = np.linalg.norm(a.mean(axis=0) - b.mean(axis=0))
        within = np.mean([np.linalg.norm(a - a.mean(axis=0), axis=1).mean(),
                          np.linalg.norm(b - b.mean(axis=0), axis=1).mean()])
        assert between > within

    def test_to_frame(self, subset):
        frame = run_ordination(subset, INDEX_COLUMNS).to_frame()

        assert list(frame.columns) == ["NMDS1", "NMDS2", "Habitat"]
        assert len(frame) == 16


class TestNonConvergence:
    def test_max_iter_reached(self, subset):
        """Test hitting max_iter flags the result and warns."""
        values = standardize(subset[INDEX_COLUMNS].to_numpy())
        d = manhattan_dissimilarity(values)

        with pytest.warns(OrdinationNonConvergence):
            _, _, n_iter, converged = run_nmds(d, max_iter=1, n_init=1)

        assert n_iter == 1
        assert not converged
