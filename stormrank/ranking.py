"""Per-event-type totals and top-N rankings."""

from __future__ import annotations

import logging
import numbers
from typing import List, Tuple

import pandas as pd

from .settings import DEFAULT_TOP_N

LOGGER = logging.getLogger(__name__)

MEASURES = ("fatalities", "damage_total")


def _empty_totals() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "event_type": pd.Series(dtype="object"),
            "fatalities": pd.Series(dtype="int64"),
            "damage_total": pd.Series(dtype="float64"),
        }
    )


def aggregate_by_event_type(normalized: pd.DataFrame) -> pd.DataFrame:
    """Sum fatalities and damage_total per event type.

    Groups come out in the order their event type first appears.
    """
    if normalized.empty:
        return _empty_totals()

    totals = (
        normalized.groupby("event_type", sort=False, dropna=False)
        .agg(fatalities=("fatalities", "sum"), damage_total=("damage_total", "sum"))
        .reset_index()
    )
    totals["fatalities"] = totals["fatalities"].astype("int64")
    totals["damage_total"] = totals["damage_total"].astype("float64")
    return totals


def rank_event_types(
    normalized: pd.DataFrame,
    measure: str = "fatalities",
    n: int = DEFAULT_TOP_N,
) -> pd.DataFrame:
    """Return the ``n`` event types with the largest ``measure``, descending.

    Equal totals keep first-seen order. Asking for more rows than there are
    event types returns every event type.
    """
    if measure not in MEASURES:
        raise ValueError(f"Unknown measure {measure!r}; expected one of {MEASURES}")
    if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 0:
        raise ValueError(f"n must be a non-negative integer, got {n!r}")

    totals = aggregate_by_event_type(normalized)
    ranked = (
        totals.sort_values(measure, ascending=False, kind="stable")
        .head(n)
        .reset_index(drop=True)
    )
    LOGGER.info(
        "Ranked %d of %d event types by %s",
        len(ranked),
        len(totals),
        measure,
    )
    return ranked


def as_pairs(ranked: pd.DataFrame, measure: str) -> List[Tuple[str, float]]:
    """Return ``ranked`` as an ordered list of (event_type, value) pairs."""
    if measure not in MEASURES:
        raise ValueError(f"Unknown measure {measure!r}; expected one of {MEASURES}")
    return [(label, value) for label, value in zip(ranked["event_type"], ranked[measure].tolist())]
