from datetime import date, time

import pytest
from pydantic import ValidationError

from fare_prediction.data.schema import (
    CATEGORICAL_FIELDS,
    CSV_COLUMNS,
    RECORD_FIELDS,
    TravelRecord,
    parse_clock_time,
    parse_duration,
    parse_fare,
    parse_travel_date,
)
from fare_prediction.exceptions import FieldParseError

from conftest import make_record


def test_schema_has_eleven_columns_in_matching_order():
    assert len(CSV_COLUMNS) == 11
    assert len(RECORD_FIELDS) == 11
    assert RECORD_FIELDS[-1] == "fare"
    assert "fare" not in CATEGORICAL_FIELDS
    assert len(CATEGORICAL_FIELDS) == 10


def test_from_row_builds_record_with_empty_fields():
    row = "18/12/2019,ZQN,9:35 AM,WLG,6:10 PM,8h 35m,(1 stop),5h 35m in AKL,,Air New Zealand,422".split(",")
    record = TravelRecord.from_row(row)

    assert record.departure_airport == "ZQN"
    assert record.baggage == ""
    assert record.airline == "Air New Zealand"
    assert record.fare == 422.0


def test_from_row_rejects_wrong_length():
    with pytest.raises(ValueError):
        TravelRecord.from_row(["a", "b"])


def test_from_row_rejects_non_numeric_fare():
    row = ["18/12/2019", "ZQN", "", "WLG", "", "", "", "", "", "Jetstar", "cheap"]
    with pytest.raises(FieldParseError) as exc_info:
        TravelRecord.from_row(row)
    assert exc_info.value.column == "AirFare"


def test_record_is_immutable():
    record = make_record()
    with pytest.raises(ValidationError):
        record.fare = 10


def test_get_returns_categorical_value():
    record = make_record(airline="Jetstar")
    assert record.get("airline") == "Jetstar"
    with pytest.raises(KeyError):
        record.get("fare")


def test_typed_views_parse_temporal_fields():
    record = make_record()
    assert record.travel_day == date(2019, 12, 18)
    assert record.departure_clock == time(10, 20)
    assert record.arrival_clock == time(18, 10)
    assert record.duration_minutes == 7 * 60 + 50


@pytest.mark.parametrize("value,expected", [
    ("8h 35m", 515),
    ("1h 5m", 65),
    ("45m", 45),
    ("2h", 120),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "8:35", "h m"])
def test_parse_duration_rejects_malformed(value):
    with pytest.raises(FieldParseError):
        parse_duration(value)


def test_parse_travel_date_uses_day_first():
    assert parse_travel_date("01/02/2020") == date(2020, 2, 1)
    with pytest.raises(FieldParseError):
        parse_travel_date("2020-02-01")


def test_parse_clock_time_accepts_single_digit_hour():
    assert parse_clock_time("9:35 AM") == time(9, 35)
    assert parse_clock_time("12:05 PM") == time(12, 5)
    with pytest.raises(FieldParseError):
        parse_clock_time("25:00")


@pytest.mark.parametrize("value", ["nan", "inf", "", "12,5"])
def test_parse_fare_rejects_non_finite_or_garbage(value):
    with pytest.raises(FieldParseError):
        parse_fare(value)


def test_negative_fare_is_accepted_at_record_level():
    assert make_record(fare=-5).fare == -5.0


@pytest.mark.parametrize(
    "field, value, column",
    [
        ("travel_date", "2019-12-18", "TravelDate"),
        ("departure_time", "25:00", "DepartureTime"),
        ("arrival_time", "noon", "ArrivalTime"),
        ("duration", "8:35", "Duration"),
    ],
)
def test_validate_temporal_fields_names_csv_column(field, value, column):
    record = make_record(**{field: value})

    with pytest.raises(FieldParseError) as exc_info:
        record.validate_temporal_fields()
    assert exc_info.value.column == column
