"""Unit tests for shaping persisted rows into form records."""

import time
from datetime import date, datetime, timezone

import pytest

from pos_admin.application.services import TemporalResolver
from pos_admin.domain.dates import parse_effective_date
from pos_admin.domain.entities import EntitySchema, FieldKind, FieldSpec, shape_record

OUTLETS = EntitySchema(
    entity_type="outlets",
    resource="outlets",
    primary_key="id",
    code_field="outlet_code",
    effective_from_field="applicable_from",
    fields=(
        FieldSpec("outlet_code", required=True),
        FieldSpec("seats", kind=FieldKind.NUMBER),
        FieldSpec("inactive", kind=FieldKind.BOOLEAN),
        FieldSpec("applicable_from", kind=FieldKind.DATE),
    ),
)


@pytest.fixture
def india_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_surrogate_and_unknown_keys_are_dropped():
    form = shape_record(OUTLETS, {"id": 7, "outlet_code": "REST", "seats": 40, "ActiveStatus": 1})

    assert form == {"outlet_code": "REST", "seats": "40", "inactive": False, "applicable_from": ""}


@pytest.mark.parametrize(
    "raw",
    ["2024-06-01", "2024-06-01T00:00:00", "2023-12-31T18:30:00Z", date(2024, 6, 1), datetime(2024, 6, 1, 9, 0)],
)
def test_date_field_matches_resolver_calendar_date(raw):
    form = shape_record(OUTLETS, {"outlet_code": "REST", "applicable_from": raw})

    assert form["applicable_from"] == parse_effective_date(raw).isoformat()


def test_utc_timestamp_is_shown_as_local_date(india_time):
    raw = "2023-12-31T18:30:00Z"
    record = {"outlet_code": "REST", "applicable_from": raw}

    form = shape_record(OUTLETS, record)
    resolved = TemporalResolver("outlet_code", "applicable_from").resolve([record], date(2024, 1, 1))

    assert form["applicable_from"] == "2024-01-01"
    assert resolved == [record]


def test_aware_datetime_object_is_converted_before_taking_the_date(india_time):
    raw = datetime(2023, 12, 31, 18, 30, tzinfo=timezone.utc)

    assert shape_record(OUTLETS, {"applicable_from": raw})["applicable_from"] == "2024-01-01"


def test_compact_and_unparseable_dates_are_kept_as_entered():
    assert shape_record(OUTLETS, {"applicable_from": "20240601"})["applicable_from"] == "20240601"
    assert shape_record(OUTLETS, {"applicable_from": "next tuesday"})["applicable_from"] == "next tuesday"
