import numpy as np
import pandas as pd
import pytest

from stormrank.etl.storm_events import normalize_events
from stormrank.ranking import aggregate_by_event_type, as_pairs, rank_event_types


def storm_records() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "event_type": ["TORNADO", "FLOOD", "TORNADO"],
            "fatalities": [5, 2, 1],
            "damage_value": [10.0, 3.0, 0.0],
            "damage_unit": ["K", "M", ""],
        }
    )


def wide_records() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "event_type": ["HAIL", "HEAT", "FLOOD", "HAIL", "WIND", "HEAT", "FLOOD"],
            "fatalities": [0, 12, 3, 1, 4, 8, 0],
            "damage_value": [2.0, 0.0, 1.5, 300.0, 75.0, 0.0, 20.0],
            "damage_unit": ["M", "", "B", "K", "K", "", "M"],
        }
    )


def test_rank_by_fatalities_worked_example():
    ranked = rank_event_types(normalize_events(storm_records()), "fatalities", n=2)

    assert ranked["event_type"].tolist() == ["TORNADO", "FLOOD"]
    assert ranked["fatalities"].tolist() == [6, 2]
    assert ranked["damage_total"].tolist() == [10_000.0, 3_000_000.0]


def test_rank_by_damage_orders_descending():
    ranked = rank_event_types(normalize_events(storm_records()), "damage_total", n=10)
    assert ranked["event_type"].tolist() == ["FLOOD", "TORNADO"]


def test_rank_returns_all_groups_when_n_exceeds_types():
    records = pd.DataFrame(
        {
            "event_type": ["A", "B", "C", "A"],
            "fatalities": [1, 2, 3, 4],
            "damage_value": [0.0, 0.0, 0.0, 0.0],
            "damage_unit": ["", "", "", ""],
        }
    )
    ranked = rank_event_types(normalize_events(records), "fatalities", n=10)
    assert len(ranked) == 3
    assert ranked["event_type"].tolist() == ["A", "C", "B"]


@pytest.mark.parametrize("n", [0, 1, 3, 4, 50])
def test_rank_length_is_min_of_n_and_types(n):
    normalized = normalize_events(wide_records())
    for measure in ("fatalities", "damage_total"):
        ranked = rank_event_types(normalized, measure, n=n)
        assert len(ranked) == min(n, 4)
        values = ranked[measure].tolist()
        assert values == sorted(values, reverse=True)


def test_rank_ties_keep_first_seen_order():
    records = pd.DataFrame(
        {
            "event_type": ["DROUGHT", "FOG", "SURF", "FOG"],
            "fatalities": [2, 1, 3, 1],
            "damage_value": [0.0, 0.0, 0.0, 0.0],
            "damage_unit": ["", "", "", ""],
        }
    )
    ranked = rank_event_types(normalize_events(records), "fatalities", n=3)
    assert ranked["event_type"].tolist() == ["SURF", "DROUGHT", "FOG"]


def test_aggregate_conserves_totals():
    normalized = normalize_events(wide_records())
    totals = aggregate_by_event_type(normalized)

    assert totals["fatalities"].sum() == normalized["fatalities"].sum()
    assert totals["damage_total"].sum() == pytest.approx(normalized["damage_total"].sum())
    assert set(totals["event_type"]) == set(wide_records()["event_type"])


def test_aggregate_ignores_record_order():
    normalized = normalize_events(wide_records())
    shuffled = normalized.sample(frac=1, random_state=7).reset_index(drop=True)

    forward = aggregate_by_event_type(normalized).set_index("event_type").sort_index()
    backward = aggregate_by_event_type(shuffled).set_index("event_type").sort_index()
    pd.testing.assert_frame_equal(forward, backward)


def test_aggregate_keeps_labels_verbatim():
    records = pd.DataFrame(
        {
            "event_type": ["TSTM WIND", "Tstm Wind", "TSTM WIND"],
            "fatalities": [1, 1, 1],
            "damage_value": [0.0, 0.0, 0.0],
            "damage_unit": ["", "", ""],
        }
    )
    totals = aggregate_by_event_type(normalize_events(records))
    assert totals["event_type"].tolist() == ["TSTM WIND", "Tstm Wind"]
    assert totals["fatalities"].tolist() == [2, 1]


def test_rank_empty_input():
    empty = normalize_events(storm_records().iloc[0:0])
    ranked = rank_event_types(empty, "damage_total", n=10)
    assert ranked.empty
    assert list(ranked.columns) == ["event_type", "fatalities", "damage_total"]


def test_rank_rejects_unknown_measure():
    with pytest.raises(ValueError):
        rank_event_types(normalize_events(storm_records()), "injuries")


@pytest.mark.parametrize("n", [-1, 2.5, True])
def test_rank_rejects_bad_n(n):
    with pytest.raises(ValueError):
        rank_event_types(normalize_events(storm_records()), "fatalities", n=n)


def test_as_pairs():
    ranked = rank_event_types(normalize_events(storm_records()), "damage_total", n=2)
    assert as_pairs(ranked, "damage_total") == [("FLOOD", 3_000_000.0), ("TORNADO", 10_000.0)]


def test_rank_accepts_numpy_integer_n():
    ranked = rank_event_types(normalize_events(storm_records()), "fatalities", n=np.int64(1))
    assert ranked["event_type"].tolist() == ["TORNADO"]
