"""
Unit tests for domains, exceptions and logging.
"""

import logging
import warnings

import pytest

from fftsweep.core.analysis.grid import GridPoint
from fftsweep.core.analysis.selection import SkipReason
from fftsweep.core.domains import TERRESTRIAL, UNDERWATER, get_domain
from fftsweep.core.exceptions import (
    DataLoadError,
    EmptyResultSet,
    FftSweepError,
    OrdinationNonConvergence,
    SkippedGridPoint,
    warn_non_convergence,
)
from fftsweep.core.logger import PACKAGE_NAME, get_logger, set_level


class TestDomains:
    """Tests for domain conventions."""

    def test_underwater(self):
        """Test underwater habitats and grouping."""
        assert UNDERWATER.habitats == ("Pocillopora", "Non-Pocillopora")
        assert UNDERWATER.group_column == "Night"
        assert UNDERWATER.night_period_only

    def test_terrestrial(self):
        """Test terrestrial habitats and grouping."""
        assert TERRESTRIAL.habitats == ("Bushland", "Urban")
        assert TERRESTRIAL.group_column == "Chorus"
        assert not TERRESTRIAL.night_period_only

    def test_get_domain_normalizes_name(self):
        """Test lookup ignores case and surrounding whitespace."""
        assert get_domain(" Terrestrial ") is TERRESTRIAL

    def test_get_domain_unknown(self):
        """Test an unknown domain raises ValueError."""
        with pytest.raises(ValueError, match="Unknown domain"):
            get_domain("freshwater")

    def test_is_habitat(self):
        assert UNDERWATER.is_habitat("Pocillopora")
        assert not UNDERWATER.is_habitat("Bushland")


class TestExceptions:
    """Tests for the error taxonomy."""

    def test_data_load_error_message(self):
        """Test path and missing columns are part of the message."""
        error = DataLoadError("Required columns are absent.", path="in.csv", missing_columns=["H", "FS"])

        assert isinstance(error, FftSweepError)
        assert "in.csv" in str(error)
        assert "H, FS" in str(error)
        assert error.missing_columns == ["H", "FS"]

    def test_skipped_grid_point_message(self):
        """Test the skip message names the reason and grid point."""
        point = GridPoint("2023-03-14", 48000, 512, 0.5)
        skip = SkippedGridPoint(SkipReason.COHORT_TOO_SMALL, point)

        assert skip.reason is SkipReason.COHORT_TOO_SMALL
        assert "cohort_too_small" in skip.message
        assert "NFFT=512" in skip.message

    def test_empty_result_set_default_message(self):
        assert "No valid results" in EmptyResultSet().message

    def test_warn_non_convergence(self):
        """Test the non-convergence warning category."""
        with pytest.warns(OrdinationNonConvergence, match="did not converge"):
            warn_non_convergence(0.2, 300, 300)

    def test_non_convergence_is_user_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warn_non_convergence(0.2, 10, 10)

        assert issubclass(caught[0].category, UserWarning)


class TestLogger:
    """Tests for package logging configuration."""

    def test_get_logger(self):
        logger = get_logger("fftsweep.tests")

        assert logger.name == "fftsweep.tests"
        assert logging.getLogger(PACKAGE_NAME).handlers

    def test_set_level_by_name(self):
        """Test levels can be given by name."""
        set_level("debug")
        assert logging.getLogger(PACKAGE_NAME).level == logging.DEBUG

        set_level(logging.INFO)
        assert logging.getLogger(PACKAGE_NAME).level == logging.INFO

    def test_set_level_unknown(self):
        with pytest.raises(ValueError, match="Unknown logging level"):
            set_level("LOUD")
