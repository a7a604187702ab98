"""
Acoustic Index Table Loading
============================

Reads the table produced by the acoustic-index stage (one row per audio
file and FFT configuration), normalizes timestamps, derives the grouping
key of each record and coerces the FFT configuration and index values to
numbers.

Grouping keys:
- underwater: the night a recording belongs to. Recordings made before
  noon count towards the previous calendar date's night.
- terrestrial: "{date}_Dawn" for recordings before noon, "{date}_Dusk"
  otherwise.

Example:
    >>> from fftsweep.core.analysis.loader import load_observations
    >>> from fftsweep.core.domains import UNDERWATER
    >>> observations = load_observations("indices.csv", UNDERWATER)
    >>> observations.group_keys()
    ['2023-03-14', '2023-03-15']
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Union

import pandas as pd

from fftsweep.core.domains import Domain
from fftsweep.core.exceptions import DataLoadError

logger = logging.getLogger(__name__)

__all__ = [
    "BASE_COLUMNS",
    "GROUP_KEY",
    "TIMESTAMP",
    "ObservationSet",
    "load_observations",
    "prepare_observations",
    "night_key",
    "chorus_key",
]

BASE_COLUMNS = ["File", "Habitat", "NFFT", "Overlap", "FS"]
DEFAULT_INDEX_COLUMNS = ("H", "ACI", "AEI", "ADI", "NDSI")

# Columns added by the loader
GROUP_KEY = "GroupKey"
TIMESTAMP = "Timestamp"


@dataclass
class ObservationSet:
    """
    The full set of observations for one run.

    The frame is shared read-only by every grid point; selections always
    return copies.

    Attributes:
        frame: One row per observation with Habitat (categorical, reference
            habitat first), Timestamp, GroupKey, FS, NFFT, Overlap and the
            acoustic index columns
        domain: Domain conventions the data was loaded with
        index_columns: Acoustic index columns used for ordination
        source: Path the data was read from, if any
    """

    frame: pd.DataFrame
    domain: Domain
    index_columns: Sequence[str] = DEFAULT_INDEX_COLUMNS
    source: str = ""

    def __len__(self) -> int:
        return len(self.frame)

    def group_keys(self) -> List[str]:
        """Distinct grouping keys present in the data, sorted."""
        return sorted(self.frame[GROUP_KEY].dropna().unique().tolist())

    def habitat_counts(self) -> pd.Series:
        """Number of observations per habitat, in reporting order."""
        return self.frame["Habitat"].value_counts(sort=False)


def night_key(timestamps: pd.Series) -> pd.Series:
    """Assign each timestamp to a night; before noon belongs to the previous date."""
    dates = timestamps.dt.normalize()
    before_noon = timestamps.dt.hour < 12
    dates = dates.where(~before_noon, dates - pd.Timedelta(days=1))
    return dates.dt.strftime("%Y-%m-%d")


def chorus_key(timestamps: pd.Series) -> pd.Series:
    """Assign each timestamp to the dawn or dusk chorus of its date."""
    dates = timestamps.dt.strftime("%Y-%m-%d")
    period = (timestamps.dt.hour < 12).map({True: "Dawn", False: "Dusk"})
    return dates + "_" + period


def _parse_timestamps(df: pd.DataFrame, dayfirst: bool) -> pd.Series:
    if "DateTime" in df.columns:
        raw = df["DateTime"].astype(str)
    else:
        raw = df["Date"].astype(str).str.strip() + " " + df["Time"].astype(str).str.strip()
    return pd.to_datetime(raw, errors="coerce", dayfirst=dayfirst)


def _missing_columns(df: pd.DataFrame, index_columns: Sequence[str]) -> List[str]:
    missing = [c for c in [*BASE_COLUMNS, *index_columns] if c not in df.columns]
    if "DateTime" not in df.columns:
        missing.extend(c for c in ("Date", "Time") if c not in df.columns)
    return missing


def prepare_observations(
    raw: pd.DataFrame,
    domain: Domain,
    index_columns: Sequence[str] = DEFAULT_INDEX_COLUMNS,
    dayfirst: bool = False,
    period_column: str = "Period",
    period_value: str = "Night",
    source: str = "",
) -> ObservationSet:
    """
    Normalize a raw index table into an ObservationSet.

    Args:
        raw: Table as read from disk
        domain: Domain conventions (grouping, habitats, period filter)
        index_columns: Acoustic index columns used for ordination
        dayfirst: Parse ambiguous dates as day/month
        period_column: Column holding the recording period (underwater only)
        period_value: Period kept before grouping (underwater only)
        source: Path the table came from, used in messages

    Returns:
        ObservationSet with derived grouping keys

    Raises:
        DataLoadError: If required columns are absent
    """
    missing = _missing_columns(raw, index_columns)
    if missing:
        raise DataLoadError("Required columns are absent.", path=source or None, missing_columns=missing)

    df = raw.copy()
    n_raw = len(df)

    if domain.night_period_only:
        if period_column in df.columns:
            keep = df[period_column].astype(str).str.strip() == period_value
            logger.info(f"Keeping {int(keep.sum())} of {n_raw} records tagged '{period_value}'")
            df = df[keep].copy()
        else:
            logger.warning(
                f"Column '{period_column}' not found; night-period filter not applied"
            )

    df[TIMESTAMP] = _parse_timestamps(df, dayfirst)
    bad_time = df[TIMESTAMP].isna()
    if bad_time.any():
        logger.warning(f"Dropping {int(bad_time.sum())} records with unparseable date/time")
        df = df[~bad_time].copy()

    for column in ["FS", "NFFT", "Overlap", *index_columns]:
        df[column] = pd.to_numeric(df[column], errors="coerce")
    incomplete = df[["FS", "NFFT", "Overlap", *index_columns]].isna().any(axis=1)
    if incomplete.any():
        logger.warning(
            f"Dropping {int(incomplete.sum())} records with missing FFT configuration or index values"
        )
        df = df[~incomplete].copy()

    habitat = df["Habitat"].astype(str).str.strip()
    foreign = ~habitat.isin(domain.habitats)
    if foreign.any():
        others = sorted(habitat[foreign].unique().tolist())
        logger.warning(
            f"Dropping {int(foreign.sum())} records with habitats outside "
            f"{list(domain.habitats)}: {others}"
        )
    df = df[~foreign].copy()
    df["Habitat"] = pd.Categorical(habitat[~foreign], categories=list(domain.habitats))

    if domain.night_period_only:
        df[GROUP_KEY] = night_key(df[TIMESTAMP])
    else:
        df[GROUP_KEY] = chorus_key(df[TIMESTAMP])

    df = df.reset_index(drop=True)
    logger.info(
        f"Loaded {len(df)} observations in {df[GROUP_KEY].nunique()} groups "
        f"({domain.name}, {len(index_columns)} indices)"
    )
    return ObservationSet(frame=df, domain=domain, index_columns=tuple(index_columns), source=source)


def load_observations(
    path: Union[str, Path],
    domain: Domain,
    index_columns: Sequence[str] = DEFAULT_INDEX_COLUMNS,
    dayfirst: bool = False,
    period_column: str = "Period",
    period_value: str = "Night",
    sep: str = ",",
) -> ObservationSet:
    """
    Load the acoustic index table for a domain.

    Args:
        path: Delimited text file with a header row
        domain: Domain conventions (grouping, habitats, period filter)
        index_columns: Acoustic index columns used for ordination
        dayfirst: Parse ambiguous dates as day/month
        period_column: Column holding the recording period (underwater only)
        period_value: Period kept before grouping (underwater only)
        sep: Field delimiter

    Returns:
        ObservationSet with derived grouping keys

    Raises:
        DataLoadError: If the file is missing, unparseable, or lacks required columns
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError("Input file does not exist.", path=str(path))

    try:
        raw = pd.read_csv(path, sep=sep)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise DataLoadError(f"Could not parse input file: {e}", path=str(path)) from e

    return prepare_observations(
        raw,
        domain,
        index_columns=index_columns,
        dayfirst=dayfirst,
        period_column=period_column,
        period_value=period_value,
        source=str(path),
    )
