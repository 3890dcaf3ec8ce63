"""
Error taxonomy of the fare prediction pipeline.

Every error is fatal to the operation that raised it: nothing is retried and no
partial result is returned. Each exception keeps the context needed to diagnose
the failure (file path, line number, column name) as attributes, so callers can
report it without parsing the message.
"""

from typing import Optional

from sklearn.exceptions import NotFittedError


class FarePredictionError(Exception):
    """Base class for all errors raised by the fare prediction package."""


class MalformedRowError(FarePredictionError, ValueError):
    """A CSV row does not have the number of fields required by the schema."""

    def __init__(self, path: str, line_number: int, expected: int, actual: int):
        self.path = str(path)
        self.line_number = line_number
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{self.path}:{line_number}: expected {expected} columns, found {actual}"
        )


class FileDecodeError(FarePredictionError, ValueError):
    """A line of an input file is not valid text in the expected encoding."""

    def __init__(self, path: str, line_number: int, encoding: str, reason: str):
        self.path = str(path)
        self.line_number = line_number
        self.encoding = encoding
        self.reason = reason
        super().__init__(f"{self.path}:{line_number}: not valid {encoding} text ({reason})")


class FieldParseError(FarePredictionError, ValueError):
    """A single field could not be converted to its declared type."""

    def __init__(self, column: str, value: str, path: Optional[str] = None,
                 line_number: Optional[int] = None, reason: Optional[str] = None):
        self.column = column
        self.value = value
        self.path = str(path) if path is not None else None
        self.line_number = line_number
        self.reason = reason

        location = ""
        if self.path is not None:
            location = f"{self.path}:{line_number}: " if line_number is not None else f"{self.path}: "
        message = f"{location}cannot parse column '{column}' from value {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

    def with_location(self, path: str, line_number: int) -> "FieldParseError":
        """Returns a copy of the error annotated with the file position."""
        return FieldParseError(self.column, self.value, path=path,
                               line_number=line_number, reason=self.reason)


class EncoderNotFittedError(FarePredictionError, NotFittedError):
    """The categorical encoder was used before `fit` (or for a column it never saw)."""


class EmptyEvaluationSetError(FarePredictionError, ValueError):
    """Metrics were requested over a held-out set with no records."""


class StaleModelError(FarePredictionError):
    """A prediction request does not match the column layout the model was fitted with."""

    def __init__(self, message: str, expected_columns=None, actual_columns=None):
        self.expected_columns = list(expected_columns) if expected_columns is not None else None
        self.actual_columns = list(actual_columns) if actual_columns is not None else None
        super().__init__(message)


class ModelLoadError(FarePredictionError):
    """A persisted model archive is missing, corrupt or incompatible."""

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot load model from {self.path}: {reason}")
