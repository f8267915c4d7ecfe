"""Paths, download location and report defaults, overridable from the environment."""
from functools import lru_cache
from pathlib import Path
import os

STORM_DATA_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"

DATA_RAW = Path(__file__).resolve().parents[1] / "data" / "raw"
DEFAULT_STORM_CSV = DATA_RAW / "StormData.csv.bz2"
OUTPUT_DIR = Path(__file__).resolve().parents[1] / "output"

DEFAULT_TOP_N = 10

# PROPDMGEXP codes recognised by the report; any other code contributes 0.
UNIT_MULTIPLIERS = {
    "K": 1e3,
    "M": 1e6,
    "B": 1e9,
}


@lru_cache
def storm_data_url() -> str:
    """Return ``$STORM_DATA_URL`` or the course mirror of the NOAA extract."""
    return os.getenv("STORM_DATA_URL", STORM_DATA_URL)


@lru_cache
def storm_data_path() -> Path:
    """Return ``$STORM_DATA_PATH`` or the default ``data/raw`` location."""
    return Path(os.getenv("STORM_DATA_PATH", str(DEFAULT_STORM_CSV)))


@lru_cache
def top_n() -> int:
    """Return ``$STORMRANK_TOP_N`` as an int, falling back to :data:`DEFAULT_TOP_N`."""
    raw = os.getenv("STORMRANK_TOP_N")
    if raw is None or not raw.strip():
        return DEFAULT_TOP_N
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"STORMRANK_TOP_N must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"STORMRANK_TOP_N must be non-negative, got {value}")
    return value
