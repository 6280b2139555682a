import json

import pytest
from pydantic import ValidationError

from dailyproxy.schemas import CacheRecord, is_sample_value, load_record


def test_absent_and_garbage_load_as_none():
    assert load_record(None) is None
    assert load_record("not json") is None
    assert load_record("[1, 2, 3]") is None


def test_legacy_record_without_series_loads_with_empty_series():
    legacy = json.dumps({"timestamp": "2025-07-01T08:00:00.000Z", "data": [{"value": 1}]})
    rec = load_record(legacy)
    assert rec == CacheRecord(timestamp="2025-07-01T08:00:00.000Z")
    assert rec.historicalValues == ()
    assert rec.historicalDates == ()


def test_non_list_series_fields_are_treated_as_empty():
    rec = load_record(json.dumps({"timestamp": 5, "historicalValues": "x", "historicalDates": None}))
    assert rec.timestamp == ""
    assert rec.historicalValues == ()


def test_mismatched_lengths_align_on_newest_entries():
    raw = json.dumps(
        {
            "timestamp": "2025-07-01T08:00:00.000Z",
            "historicalValues": [1, 2, 3, 4],
            "historicalDates": ["c", "d"],
        }
    )
    rec = load_record(raw)
    assert rec.historicalValues == (3, 4)
    assert rec.historicalDates == ("c", "d")


def test_bad_pairs_are_dropped_together():
    raw = json.dumps(
        {
            "timestamp": "2025-07-01T08:00:00.000Z",
            "historicalValues": [1, "two", 3, True],
            "historicalDates": ["a", "b", 7, "d"],
        }
    )
    rec = load_record(raw)
    assert rec.historicalValues == (1,)
    assert rec.historicalDates == ("a",)


def test_ints_stay_ints_in_serialized_output():
    rec = CacheRecord(timestamp="t", historicalValues=(42, 1.5), historicalDates=("Jul 1", "Jul 2"))
    body = json.loads(rec.model_dump_json())
    assert body == {"timestamp": "t", "historicalValues": [42, 1.5], "historicalDates": ["Jul 1", "Jul 2"]}
    assert rec.model_dump_json() == load_record(rec.model_dump_json()).model_dump_json()


def test_is_sample_value():
    assert is_sample_value(0)
    assert is_sample_value(-3.25)
    assert not is_sample_value(True)
    assert not is_sample_value(float("nan"))
    assert not is_sample_value(float("inf"))
    assert not is_sample_value("1")
    assert not is_sample_value(None)
    assert not is_sample_value(10**400)


def test_stored_value_too_large_for_float_is_dropped():
    raw = json.dumps(
        {
            "timestamp": "2025-07-01T08:00:00.000Z",
            "historicalValues": [1, 10**400],
            "historicalDates": ["a", "b"],
        }
    )
    rec = load_record(raw)
    assert rec.historicalValues == (1,)
    assert rec.historicalDates == ("a",)


def test_record_rejects_mismatched_series():
    with pytest.raises(ValidationError, match="series length mismatch"):
        CacheRecord(timestamp="t", historicalValues=(1, 2), historicalDates=("a",))
