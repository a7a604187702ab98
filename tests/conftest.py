# tests/conftest.py
"""
Global pytest fixtures for fftsweep tests.
"""

from typing import Iterable, Optional, Sequence, Tuple

import matplotlib
import numpy as np
import pandas as pd
import pytest

from fftsweep.core.config import get_default_config
from fftsweep.core.domains import get_domain

matplotlib.use("Agg")

INDEX_COLUMNS = ["H", "ACI", "AEI", "ADI", "NDSI"]


def build_index_table(
    domain: str = "underwater",
    dates: Iterable[str] = ("2023-03-14",),
    configs: Iterable[Tuple[float, int, float]] = ((48000, 512, 0.5),),
    n_per_habitat: int = 8,
    shift: float = 4.0,
    seed: int = 0,
    habitats: Optional[Sequence[str]] = None,
    chorus: str = "Dusk",
) -> pd.DataFrame:
    """
    Synthetic acoustic index table.

    Each habitat cohort is drawn from a unit normal in index space, offset
    by ``shift`` per habitat. Underwater records are stamped at 22:xx on
    each date (same-date night); terrestrial records at 06:xx (Dawn) or
    18:xx (Dusk).
    """
    rng = np.random.default_rng(seed)
    habitats = list(habitats or get_domain(domain).habitats)
    hour = 22 if domain == "underwater" else (6 if chorus == "Dawn" else 18)

    records = []
    for date in dates:
        for fs, nfft, overlap in configs:
            for h_idx, habitat in enumerate(habitats):
                values = rng.normal(loc=h_idx * shift, scale=1.0, size=(n_per_habitat, len(INDEX_COLUMNS)))
                for i in range(n_per_habitat):
                    record = {
                        "File": f"{habitat}_{date}_{i:03d}.wav",
                        "Habitat": habitat,
                        "DateTime": f"{date} {hour:02d}:{i % 60:02d}:00",
                        "FS": fs,
                        "NFFT": nfft,
                        "Overlap": overlap,
                    }
                    if domain == "underwater":
                        record["Period"] = "Night"
                    record.update(dict(zip(INDEX_COLUMNS, values[i])))
                    records.append(record)
    return pd.DataFrame.from_records(records)


@pytest.fixture
def make_index_table():
    """Factory for synthetic index tables (see build_index_table)."""
    return build_index_table


@pytest.fixture
def write_csv(tmp_path):
    """Write a DataFrame to a CSV under tmp_path and return its path."""

    def _write(df: pd.DataFrame, name: str = "indices.csv") -> str:
        path = tmp_path / name
        df.to_csv(path, index=False)
        return str(path)

    return _write


@pytest.fixture
def index_table():
    """Two well separated cohorts on one night at FS=48000, NFFT=512, overlap 0.5."""
    return build_index_table()


@pytest.fixture
def index_csv(tmp_path, index_table):
    """The default index table written to CSV."""
    path = tmp_path / "indices.csv"
    index_table.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def small_config():
    """Default configuration restricted to a small grid, plots off."""
    config = get_default_config()
    config.set("sweep", "sample_rates", [48000])
    config.set("sweep", "nfft_values", [512, 1024])
    config.set("sweep", "overlaps", [0.5])
    config.set("kde", "grid_size", 40)
    config.set("output", "plots", False)
    return config


@pytest.fixture
def small_config_file(tmp_path):
    """TOML file with a small grid, for CLI tests."""
    path = tmp_path / "fftsweep.toml"
    path.write_text(
        "[sweep]\n"
        "sample_rates = [48000]\n"
        "nfft_values = [512, 1024]\n"
        "overlaps = [0.5]\n"
        "\n"
        "[kde]\n"
        "grid_size = 40\n",
        encoding="utf-8",
    )
    return str(path)
