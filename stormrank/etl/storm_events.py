"""Load the NOAA storm events extract and normalise property damage to dollars."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from ..settings import UNIT_MULTIPLIERS

LOGGER = logging.getLogger(__name__)

# Source header -> record column.
SOURCE_COLUMNS = {
    "EVTYPE": "event_type",
    "FATALITIES": "fatalities",
    "PROPDMG": "damage_value",
    "PROPDMGEXP": "damage_unit",
}
RECORD_COLUMNS = ["event_type", "fatalities", "damage_value", "damage_unit"]
NORMALIZED_COLUMNS = ["event_type", "fatalities", "damage_total"]

# Blank cells in the numeric columns count as zero.
_BLANK_NUMERIC = {"", "NA"}

_INT64_LIMIT = float(np.iinfo("int64").max)


def _source_name(column: str) -> str:
    return str(column).strip().upper()


def _to_measure(series: pd.Series, column: str) -> pd.Series:
    """Parse ``series`` as finite non-negative numbers, raising on anything else."""
    text = series.astype(str).str.strip()
    cleaned = text.where(~text.isin(_BLANK_NUMERIC), "0")
    values = pd.to_numeric(cleaned, errors="coerce").astype("float64")
    bad = ~np.isfinite(values) | (values < 0)
    if bad.any():
        sample = series[bad].head(5).tolist()
        msg = f"{int(bad.sum())} rows have non-numeric, infinite or negative {column} values, e.g. {sample}"
        LOGGER.error(msg)
        raise ValueError(msg)
    return values


def _to_count(series: pd.Series, column: str) -> pd.Series:
    """Parse ``series`` as whole numbers that fit in int64."""
    values = _to_measure(series, column)
    bad = (values % 1 != 0) | (values >= _INT64_LIMIT)
    if bad.any():
        sample = series[bad].head(5).tolist()
        msg = f"{int(bad.sum())} rows have fractional or out-of-range {column} values, e.g. {sample}"
        LOGGER.error(msg)
        raise ValueError(msg)
    return values.astype("int64")


def load_storm_events_csv(
    csv_path: str | Path,
    canonicalize_event_types: bool = False,
) -> pd.DataFrame:
    """Read the storm events CSV into a record frame.

    Parameters
    ----------
    csv_path:
        Path to the delimited file. Compression (``.bz2``, ``.gz``, ...) is
        inferred from the suffix.
    canonicalize_event_types:
        Strip and upper-case ``event_type`` labels. Off by default so the
        labels are aggregated exactly as they appear in the source.

    Returns
    -------
    pd.DataFrame
        Columns: event_type, fatalities (int64), damage_value (float64),
        damage_unit (str, verbatim).

    Rows with more fields than the header fail the load. Rows with fewer
    fields are padded with blanks, which count as 0 / no unit code.
    """

    path = Path(csv_path)
    if not path.exists():
        msg = f"Storm data file does not exist: {path}"
        LOGGER.error(msg)
        raise FileNotFoundError(msg)

    LOGGER.info("Reading storm events from %s", path)
    try:
        # header=None so every row, the first data row included, is checked
        # against the header width
        raw = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    except ValueError as exc:  # ParserError and EmptyDataError are ValueErrors
        LOGGER.error("Failed to parse %s: %s", path, exc)
        raise

    positions: dict[str, int] = {}
    for position, name in enumerate(raw.iloc[0]):
        column = SOURCE_COLUMNS.get(_source_name(name))
        if column is not None and column not in positions:
            positions[column] = position

    missing = set(RECORD_COLUMNS) - set(positions)
    if missing:
        wanted = {v: k for k, v in SOURCE_COLUMNS.items()}
        msg = "CSV is missing required columns: %s" % ", ".join(sorted(wanted[m] for m in missing))
        LOGGER.error(msg)
        raise ValueError(msg)

    body = raw.iloc[1:].reset_index(drop=True)
    records = pd.DataFrame(
        {column: body.iloc[:, positions[column]].fillna("") for column in RECORD_COLUMNS}
    )
    records["fatalities"] = _to_count(records["fatalities"], "FATALITIES")
    records["damage_value"] = _to_measure(records["damage_value"], "PROPDMG")

    if canonicalize_event_types:
        records["event_type"] = records["event_type"].str.strip().str.upper()

    LOGGER.info(
        "Loaded %d records covering %d event types",
        len(records),
        records["event_type"].nunique(),
    )
    return records


def _check_multipliers(multipliers: Mapping[str, float]) -> Mapping[str, float]:
    for code, factor in multipliers.items():
        if not np.isfinite(factor) or factor < 0:
            raise ValueError(f"Multiplier for unit code {code!r} must be finite and non-negative, got {factor}")
    return multipliers


def unit_multiplier(code: object, multipliers: Mapping[str, float] = UNIT_MULTIPLIERS) -> float:
    """Return the dollar multiplier for ``code``; unknown or missing codes give 0.

    Matching is exact, so ``"b"`` is not ``"B"``.
    """
    if not isinstance(code, str):
        return 0.0
    return float(multipliers.get(code, 0.0))


def normalize_damage(
    value: float,
    code: object,
    multipliers: Mapping[str, float] = UNIT_MULTIPLIERS,
) -> float:
    """Return ``value`` scaled to dollars by its unit code."""
    _check_multipliers(multipliers)
    if value < 0:
        raise ValueError(f"Damage value must be non-negative, got {value}")
    return float(value) * unit_multiplier(code, multipliers)


def normalize_events(
    records: pd.DataFrame,
    multipliers: Optional[Mapping[str, float]] = None,
) -> pd.DataFrame:
    """Return event_type, fatalities and damage_total for every record.

    ``records`` is left untouched. Rows whose unit code is not in
    ``multipliers`` get a damage_total of 0; the count of such rows with a
    non-empty code is logged so the loss is visible.
    """

    table = dict(_check_multipliers(UNIT_MULTIPLIERS if multipliers is None else multipliers))

    missing = set(RECORD_COLUMNS) - set(records.columns)
    if missing:
        raise ValueError(f"Records are missing columns: {sorted(missing)}")

    if records.empty:
        return pd.DataFrame(
            {
                "event_type": pd.Series(dtype="object"),
                "fatalities": pd.Series(dtype="int64"),
                "damage_total": pd.Series(dtype="float64"),
            }
        )

    units = records["damage_unit"]
    factor = units.map(lambda code: unit_multiplier(code, table))

    unmapped = units.map(lambda code: isinstance(code, str) and code != "" and code not in table)
    if unmapped.any():
        codes = sorted(units[unmapped].unique())
        LOGGER.warning(
            "%d records carry unrecognised damage unit codes %s; their damage counts as 0",
            int(unmapped.sum()),
            codes,
        )

    normalized = pd.DataFrame(
        {
            "event_type": records["event_type"],
            "fatalities": records["fatalities"].fillna(0).astype("int64"),
            "damage_total": records["damage_value"].fillna(0).astype("float64") * factor.astype("float64"),
        }
    )
    return normalized.reset_index(drop=True)
