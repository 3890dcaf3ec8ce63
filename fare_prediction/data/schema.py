"""
Record schema for the fare datasets.

One `TravelRecord` is built per CSV row and is never mutated afterwards. The
temporal fields are kept as the raw strings found in the file; typed views
(`travel_day`, `departure_clock`, `arrival_clock`, `duration_minutes`) parse
them on demand.
"""

import math
import re
from datetime import date, datetime, time
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fare_prediction.exceptions import FieldParseError

SCHEMA_VERSION = 1

# CSV headers in file order
CSV_COLUMNS = [
    "TravelDate",
    "DepartureAirport",
    "DepartureTime",
    "ArrivalAirport",
    "ArrivalTime",
    "Duration",
    "Direct",
    "Transit",
    "Baggage",
    "Airline",
    "AirFare",
]

# Python field names, same order as CSV_COLUMNS
RECORD_FIELDS = [
    "travel_date",
    "departure_airport",
    "departure_time",
    "arrival_airport",
    "arrival_time",
    "duration",
    "direct",
    "transit",
    "baggage",
    "airline",
    "fare",
]

FIELD_TO_COLUMN = dict(zip(RECORD_FIELDS, CSV_COLUMNS))

# Every field but the label may be one-hot encoded
CATEGORICAL_FIELDS = RECORD_FIELDS[:-1]
TEMPORAL_FIELDS = ["travel_date", "departure_time", "arrival_time", "duration"]

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%I:%M %p"
_DURATION_PATTERN = re.compile(r"^\s*(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?\s*$")


def parse_travel_date(value: str, column: str = "TravelDate") -> date:
    """Parses a `dd/MM/yyyy` date."""
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise FieldParseError(column, value, reason=f"expected dd/MM/yyyy: {e}") from e


def parse_clock_time(value: str, column: str = "DepartureTime") -> time:
    """Parses a 12-hour `h:mm AM/PM` time of day."""
    try:
        return datetime.strptime(value.strip().upper(), TIME_FORMAT).time()
    except ValueError as e:
        raise FieldParseError(column, value, reason=f"expected h:mm AM/PM: {e}") from e


def parse_duration(value: str, column: str = "Duration") -> int:
    """
    Parses a compact `<h>h <mm>m` duration into minutes.

    Either part may be omitted ("45m", "2h") but not both.
    """
    match = _DURATION_PATTERN.match(value)
    if match is None or (match.group(1) is None and match.group(2) is None):
        raise FieldParseError(column, value, reason="expected '<h>h <mm>m'")

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def parse_fare(value, column: str = "AirFare") -> float:
    """Parses the label column into a finite float."""
    try:
        fare = float(str(value).strip())
    except ValueError as e:
        raise FieldParseError(column, value, reason="not a number") from e

    if not math.isfinite(fare):
        raise FieldParseError(column, value, reason="not a finite number")
    return fare


_TEMPORAL_PARSERS = {
    "travel_date": parse_travel_date,
    "departure_time": parse_clock_time,
    "arrival_time": parse_clock_time,
    "duration": parse_duration,
}


class TravelRecord(BaseModel):
    """
    One observed trip with its fare.

    All ten descriptive fields are present (possibly empty strings). The fare is
    accepted as any finite number here; negative or extreme values are removed
    later by the outlier filter.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    travel_date: str = ""
    departure_airport: str = ""
    departure_time: str = ""
    arrival_airport: str = ""
    arrival_time: str = ""
    duration: str = ""
    direct: str = ""
    transit: str = ""
    baggage: str = ""
    airline: str = ""
    fare: float = Field(default=0.0, description="Fare amount, the regression label")

    @field_validator("fare", mode="before")
    @classmethod
    def validate_fare(cls, value):
        return parse_fare(value)

    @classmethod
    def from_row(cls, values: Sequence[str]) -> "TravelRecord":
        """
        Builds a record from the 11 ordered values of a CSV row.

        Raises:
            ValueError: If the number of values is not 11.
            FieldParseError: If the fare is not a finite number.
        """
        if len(values) != len(RECORD_FIELDS):
            raise ValueError(f"Expected {len(RECORD_FIELDS)} values, got {len(values)}")

        data = dict(zip(RECORD_FIELDS[:-1], values[:-1]))
        # FieldParseError must not be wrapped in a pydantic ValidationError
        data["fare"] = parse_fare(values[-1])
        return cls(**data)

    def get(self, column: str) -> str:
        """Returns the value of a descriptive field by its python name."""
        if column not in CATEGORICAL_FIELDS:
            raise KeyError(f"Unknown categorical column '{column}'")
        return getattr(self, column)

    # --- Typed views of the temporal fields ---

    def _parse_temporal(self, field_name: str):
        parser = _TEMPORAL_PARSERS[field_name]
        return parser(getattr(self, field_name), column=FIELD_TO_COLUMN[field_name])

    @property
    def travel_day(self) -> date:
        return self._parse_temporal("travel_date")

    @property
    def departure_clock(self) -> time:
        return self._parse_temporal("departure_time")

    @property
    def arrival_clock(self) -> time:
        return self._parse_temporal("arrival_time")

    @property
    def duration_minutes(self) -> int:
        return self._parse_temporal("duration")

    def validate_temporal_fields(self) -> None:
        """Parses every temporal field, raising `FieldParseError` on the first failure."""
        for field_name in TEMPORAL_FIELDS:
            self._parse_temporal(field_name)
