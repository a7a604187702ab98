"""
Unit tests for fftsweep.models and fftsweep.services.base.
"""

from dataclasses import fields

import numpy as np

from fftsweep.core.analysis.selection import SkipReason
from fftsweep.models.sweep import GridPreview, GridPreviewEntry, SweepSummary
from fftsweep.services.base import BatchProgress, ServiceResult


class TestSweepSummary:
    def test_skipped_and_empty(self):
        summary = SweepSummary(domain="underwater", skip_counts={"no_match": 3, "cohort_too_small": 1})

        assert summary.skipped == 4
        assert summary.empty

    def test_to_dict(self):
        """Test derived properties are included in dict output."""
        summary = SweepSummary(
            domain="terrestrial", valid_rows=2, skip_counts={"no_match": np.int64(3)}, plot_paths=["a.png"]
        )

        data = summary.to_dict()

        assert data["domain"] == "terrestrial"
        assert data["skip_counts"] == {"no_match": 3}
        assert isinstance(data["skip_counts"]["no_match"], int)
        assert data["empty"] is False
        assert data["skipped"] == 3


class TestGridPreview:
    def test_matching(self):
        preview = GridPreview(
            domain="underwater",
            entries=[
                GridPreviewEntry("n1", 48000, 512, 0.5, n_observations=4),
                GridPreviewEntry("n1", 48000, 1024, 0.5, n_observations=0),
            ],
        )

        assert preview.total == 2
        assert [e.nfft for e in preview.matching] == [512]
        assert preview.to_dict()["entries"][0]["n_observations"] == 4


class TestServiceResult:
    def test_ok(self):
        result = ServiceResult.ok(data={"rows": 1}, message="done", path="x.csv")

        assert result.success
        assert result.metadata == {"path": "x.csv"}
        assert result.to_dict()["data"] == {"rows": 1}

    def test_fail(self):
        result = ServiceResult.fail("boom")

        assert not result.success
        assert result.error == "boom"
        assert result.to_dict()["data"] is None

    def test_to_dict_serializes_models(self):
        result = ServiceResult.ok(data=SweepSummary(domain="underwater", skip_counts={SkipReason.NO_MATCH: 1}))

        assert result.to_dict()["data"]["skip_counts"] == {"no_match": 1}


class TestBatchProgress:
    def test_percent_and_remaining(self):
        progress = BatchProgress(total=8, completed=2)

        assert progress.percent == 25.0
        assert progress.remaining == 6

    def test_percent_empty(self):
        assert BatchProgress(total=0).percent == 0

    def test_fields(self):
        """Test progress carries only counts and the current item."""
        assert [f.name for f in fields(BatchProgress)] == ["total", "completed", "current_item"]
