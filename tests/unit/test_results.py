"""
Unit tests for fftsweep.core.results module.
"""

import pandas as pd
import pytest

from fftsweep.core.analysis.pipeline import DescriptorRow
from fftsweep.core.exceptions import EmptyResultSet
from fftsweep.core.results import ResultSink, output_columns


def _row(group="2023-03-14", nfft=512):
    return DescriptorRow(
        group=group, fs=48000, overlap=0.5, nfft=nfft, centroid_distance=1.5,
        habitat1_dispersion=0.4, habitat2_dispersion=0.6, kde_overlap=0.25,
        bhattacharyya_coefficient=0.3, nmds_stress=0.08, nmds_converged=True,
    )


class TestOutputColumns:
    def test_default(self):
        assert output_columns("Night") == [
            "Night", "FS", "Overlap", "NFFT", "Centroid_Distance", "Habitat1_Dispersion",
            "Habitat2_Dispersion", "KDE_Overlap", "Bhattacharyya_Coefficient",
        ]

    def test_with_diagnostics(self):
        assert output_columns("Chorus", include_diagnostics=True)[-2:] == ["NMDS_Stress", "NMDS_Converged"]


class TestResultSink:
    """Tests for collecting and persisting rows."""

    def test_append_and_frame(self):
        sink = ResultSink("Night")
        sink.append(_row(nfft=512))
        sink.append(_row(nfft=1024))

        frame = sink.to_frame()

        assert len(sink) == 2
        assert frame["NFFT"].tolist() == [512, 1024]
        assert list(frame.columns) == output_columns("Night")

    def test_rows_is_a_copy(self):
        sink = ResultSink("Night")
        sink.append(_row())
        sink.rows.clear()

        assert len(sink) == 1

    def test_persist(self, tmp_path):
        """Test rows are written as CSV in insertion order."""
        sink = ResultSink("Night")
        sink.append(_row(group="2023-03-14"))
        sink.append(_row(group="2023-03-15"))

        path = sink.persist(tmp_path / "out" / "descriptors.csv")

        written = pd.read_csv(path)
        assert written["Night"].tolist() == ["2023-03-14", "2023-03-15"]
        assert list(written.columns) == output_columns("Night")
        assert written["Centroid_Distance"].tolist() == [1.5, 1.5]

    def test_persist_leaves_no_temp_files(self, tmp_path):
        sink = ResultSink("Night")
        sink.append(_row())

        sink.persist(tmp_path / "descriptors.csv")

        assert [p.name for p in tmp_path.iterdir()] == ["descriptors.csv"]

    def test_persist_with_diagnostics(self, tmp_path):
        sink = ResultSink("Chorus", include_diagnostics=True)
        sink.append(_row(group="2023-03-14_Dusk"))

        written = pd.read_csv(sink.persist(tmp_path / "descriptors.csv"))

        assert written["NMDS_Stress"].tolist() == [0.08]
        assert written["NMDS_Converged"].tolist() == [True]

    def test_empty_writes_nothing(self, tmp_path):
        """Test an empty sink raises and creates no file."""
        output = tmp_path / "out" / "descriptors.csv"

        with pytest.raises(EmptyResultSet):
            ResultSink("Night").persist(output)

        assert not output.exists()
        assert not output.parent.exists()
