"""
CSV ingestion for the fare datasets.

Turns a delimited text file with a header row into a lazy stream of
`TravelRecord`. Ingestion is fail-fast: the first malformed row aborts the
whole read, no row is skipped.
"""

import csv
from pathlib import Path
from typing import Iterable, Iterator, List

import pandas as pd

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import DELIMITER, EXPECTED_COLUMNS, LOG_LEVEL
from fare_prediction.data.schema import CSV_COLUMNS, RECORD_FIELDS, TravelRecord, parse_fare
from fare_prediction.exceptions import FieldParseError, FileDecodeError, MalformedRowError
from fare_prediction.utils.logging import get_console_logger

logger = get_console_logger(name=LOGGER_NAME, log_level=LOG_LEVEL)

ENCODING = "utf-8"


def read_travel_records(path,
                        delimiter: str = DELIMITER,
                        expected_columns: int = EXPECTED_COLUMNS,
                        parse_temporal_fields: bool = False) -> Iterator[TravelRecord]:
    """
    Lazily reads travel records from a CSV file.

    The generator skips exactly one header line and yields one record per data
    row, in file order. The file is closed when the generator is exhausted,
    closed, or garbage collected.

    Parameters:
    -----------
    path : str or Path
        CSV file to read.
    delimiter : str
        Field separator (default comma).
    expected_columns : int
        Number of fields every row must have (11 for the fare schema).
    parse_temporal_fields : bool
        Also validate date, times and duration as typed values.

    Yields:
    -------
    TravelRecord

    Raises:
    -------
    FileNotFoundError
        If the file does not exist.
    MalformedRowError
        If a row does not have `expected_columns` fields.
    FileDecodeError
        If a line is not valid UTF-8.
    FieldParseError
        If the fare (or, when enabled, a temporal field) cannot be parsed.
    """
    path = Path(path)
    logger.info(f"Loading travel records from: {path}")

    count = 0
    with open(path, 'rb') as f:
        reader = csv.reader(_decode_lines(f, path), delimiter=delimiter)

        header = next(reader, None)
        if header is None:
            logger.warning(f"Empty file, no header found: {path}")
            return

        for row in reader:
            # csv yields an empty list for blank lines
            if not row:
                continue

            line_number = reader.line_num
            if len(row) != expected_columns:
                raise MalformedRowError(path, line_number, expected_columns, len(row))

            yield _build_record(row, path, line_number, parse_temporal_fields)
            count += 1

    logger.info(f"Records loaded: {count:,}")


def _decode_lines(f, path: Path, encoding: str = ENCODING) -> Iterator[str]:
    """Decodes a binary file line by line so a bad byte is reported with its line number."""
    for line_number, raw in enumerate(f, start=1):
        try:
            yield raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise FileDecodeError(path, line_number, encoding, str(e)) from e


def _build_record(row: List[str], path: Path, line_number: int,
                  parse_temporal_fields: bool) -> TravelRecord:
    """Converts one validated row into a record, attaching the file position to parse errors."""
    try:
        fare = parse_fare(row[-1], column=CSV_COLUMNS[-1])
        record = TravelRecord.from_row(row[:-1] + [fare])
        if parse_temporal_fields:
            record.validate_temporal_fields()
    except FieldParseError as e:
        raise e.with_location(path, line_number) from e

    return record


def load_travel_records(path, **kwargs) -> List[TravelRecord]:
    """Eager variant of `read_travel_records`."""
    return list(read_travel_records(path, **kwargs))


def records_to_frame(records: Iterable[TravelRecord]) -> pd.DataFrame:
    """
    Tabular view of a record sequence, one column per record field.
    The training run logs a `describe()` of its fares from it.
    """
    return pd.DataFrame(
        [record.model_dump() for record in records],
        columns=RECORD_FIELDS,
    )
