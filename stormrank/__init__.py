__all__ = [
    "load_storm_events_csv",
    "normalize_damage",
    "normalize_events",
    "unit_multiplier",
    "aggregate_by_event_type",
    "rank_event_types",
    "as_pairs",
    "UNIT_MULTIPLIERS",
]
__version__ = "0.1.0"

from .etl.storm_events import (
    load_storm_events_csv,
    normalize_damage,
    normalize_events,
    unit_multiplier,
)
from .ranking import aggregate_by_event_type, as_pairs, rank_event_types
from .settings import UNIT_MULTIPLIERS
