"""
Feature encoding for the fare models.

Builds the numeric feature vector of a travel record in two stages:

1. Categorical encoding: one `OneHotStep` per declared column, each backed by a
   `Vocabulary` fitted on the training records only.
2. Feature assembly: the per-column one-hot blocks are concatenated in the
   declared column order into one flat vector.

The column order is a configuration constant shared between training and
inference. Encoding with a different order silently scrambles the vector, so the
order is persisted together with the model.

Values never seen during fit encode to an all-zero block rather than failing.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import LOG_LEVEL
from fare_prediction.data.schema import CATEGORICAL_FIELDS, TravelRecord
from fare_prediction.exceptions import EncoderNotFittedError
from fare_prediction.utils.logging import get_console_logger

logger = get_console_logger(name=LOGGER_NAME, log_level=LOG_LEVEL)


class Vocabulary:
    """
    Ordered set of distinct category values with stable zero-based indices.

    Indices follow first-seen order, never sorted order, so the same training
    input always yields the same vector layout.
    """

    __slots__ = ("_values", "_index")

    def __init__(self, values: Sequence[str] = ()):
        ordered = list(dict.fromkeys(values))
        self._values = tuple(ordered)
        self._index = {value: i for i, value in enumerate(ordered)}

    @classmethod
    def from_values(cls, values: Iterable[str]) -> "Vocabulary":
        return cls(list(values))

    @property
    def values(self) -> tuple:
        return self._values

    def index_of(self, value: str) -> Optional[int]:
        """Index of `value`, or None for an unseen category."""
        return self._index.get(value)

    def one_hot(self, value: str) -> np.ndarray:
        """Vector of length `len(self)`: 1.0 at the value's index, all zeros if unseen."""
        vector = np.zeros(len(self._values), dtype=np.float64)
        index = self._index.get(value)
        if index is not None:
            vector[index] = 1.0
        return vector

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def __contains__(self, value) -> bool:
        return value in self._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"Vocabulary({list(self._values)!r})"


class OneHotStep:
    """Named encoding step: one column, one vocabulary, one one-hot block."""

    def __init__(self, column: str, vocabulary: Vocabulary):
        self.column = column
        self.vocabulary = vocabulary

    @property
    def size(self) -> int:
        return len(self.vocabulary)

    @property
    def feature_names(self) -> List[str]:
        return [f"{self.column}={value}" for value in self.vocabulary]

    def __call__(self, record) -> np.ndarray:
        return self.vocabulary.one_hot(_column_value(record, self.column))

    def __repr__(self) -> str:
        return f"OneHotStep({self.column!r}, size={self.size})"


def _column_value(record, column: str) -> str:
    """Reads a column from a `TravelRecord` or a plain mapping."""
    if isinstance(record, Mapping):
        return record[column]
    return getattr(record, column)


class CategoricalEncoder:
    """
    One-hot encoder over the categorical fields of `TravelRecord`.

    The vocabularies are write-once: they are set by `fit` from the training
    records and are read-only afterwards, so a fitted encoder can be shared
    read-only between predictions.
    """

    def __init__(self):
        self._steps: Optional[Dict[str, OneHotStep]] = None
        self._columns: tuple = ()

    @property
    def is_fitted(self) -> bool:
        return self._steps is not None

    @property
    def columns(self) -> tuple:
        """Column order declared at fit time."""
        return self._columns

    @property
    def vocabularies(self) -> Mapping[str, Vocabulary]:
        self._check_fitted()
        return MappingProxyType({column: step.vocabulary for column, step in self._steps.items()})

    @property
    def n_features(self) -> int:
        self._check_fitted()
        return sum(step.size for step in self._steps.values())

    @property
    def feature_names(self) -> List[str]:
        return self.get_feature_names()

    def get_feature_names(self, columns: Optional[Sequence[str]] = None) -> List[str]:
        """`column=value` names of the encoded features, in `columns` order."""
        names = []
        for step in self._steps_for(columns):
            names.extend(step.feature_names)
        return names

    def fit(self, training_records: Iterable[TravelRecord], columns: Sequence[str]) -> "CategoricalEncoder":
        """
        Builds one vocabulary per declared column from the training records.

        Parameters:
        -----------
        training_records : iterable of TravelRecord
            Training set only; test data must never reach the vocabularies.
        columns : sequence of str
            Categorical field names, in the order their blocks are concatenated.

        Raises:
        -------
        RuntimeError
            If the encoder was already fitted.
        ValueError
            If no column is given or a column is not a categorical field.
        """
        if self.is_fitted:
            raise RuntimeError("CategoricalEncoder is already fitted; vocabularies are write-once")

        columns = tuple(columns)
        if not columns:
            raise ValueError("At least one column is required to fit the encoder")
        unknown = [column for column in columns if column not in CATEGORICAL_FIELDS]
        if unknown:
            raise ValueError(f"Unknown categorical columns: {unknown}. Valid: {CATEGORICAL_FIELDS}")
        if len(set(columns)) != len(columns):
            raise ValueError(f"Duplicate columns in {list(columns)}")

        seen = {column: {} for column in columns}
        n_records = 0
        for record in training_records:
            n_records += 1
            for column in columns:
                # dict keeps insertion order: first-seen wins
                seen[column].setdefault(_column_value(record, column), None)

        self._steps = {column: OneHotStep(column, Vocabulary(list(seen[column]))) for column in columns}
        self._columns = columns

        logger.info(f"Encoder fitted on {n_records:,} records")
        for column in columns:
            logger.debug(f"  - {column}: {self._steps[column].size} categories")
        logger.info(f"Feature vector length: {self.n_features}")
        return self

    def encode(self, record, columns: Optional[Sequence[str]] = None) -> Dict[str, np.ndarray]:
        """
        Encodes a record into one one-hot block per column.

        Each block has the length of the column's vocabulary. An unseen value
        yields an all-zero block.

        Raises:
            EncoderNotFittedError: Before `fit`, or for a column not fitted.
        """
        return {step.column: step(record) for step in self._steps_for(columns)}

    def steps(self) -> List[OneHotStep]:
        """Encoding steps in declared column order."""
        return self._steps_for(None)

    def _steps_for(self, columns: Optional[Sequence[str]]) -> List[OneHotStep]:
        self._check_fitted()
        columns = self._columns if columns is None else tuple(columns)

        steps = []
        for column in columns:
            step = self._steps.get(column)
            if step is None:
                raise EncoderNotFittedError(
                    f"CategoricalEncoder was not fitted for column '{column}'. Fitted: {list(self._columns)}"
                )
            steps.append(step)
        return steps

    def to_dict(self) -> dict:
        """Plain-data form (column order + vocabularies) used for persistence."""
        self._check_fitted()
        return {
            'columns': list(self._columns),
            'vocabularies': {column: list(step.vocabulary) for column, step in self._steps.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "CategoricalEncoder":
        """Rebuilds a fitted encoder from `to_dict` output."""
        columns = tuple(data['columns'])
        vocabularies = data['vocabularies']

        encoder = cls()
        encoder._steps = {column: OneHotStep(column, Vocabulary(vocabularies[column])) for column in columns}
        encoder._columns = columns
        return encoder

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise EncoderNotFittedError("CategoricalEncoder must be fitted before encoding records")

    def __repr__(self) -> str:
        if not self.is_fitted:
            return "CategoricalEncoder(not fitted)"
        return f"CategoricalEncoder(columns={list(self._columns)}, n_features={self.n_features})"


def assemble_features(sub_vectors: Mapping[str, np.ndarray], columns: Sequence[str]) -> np.ndarray:
    """
    Concatenates per-column blocks into one feature vector, in `columns` order.

    Raises:
        KeyError: If a column of `columns` has no block.
    """
    if not columns:
        return np.zeros(0, dtype=np.float64)
    return np.concatenate([np.asarray(sub_vectors[column], dtype=np.float64) for column in columns])


def build_feature_matrix(records: Iterable, encoder: CategoricalEncoder,
                         columns: Optional[Sequence[str]] = None) -> np.ndarray:
    """
    Encodes and assembles every record into a `(n_records, n_features)` matrix.
    An empty input gives a `(0, n_features)` matrix.
    """
    columns = encoder.columns if columns is None else tuple(columns)
    rows = [assemble_features(encoder.encode(record, columns), columns) for record in records]

    if not rows:
        width = sum(len(encoder.vocabularies[column]) for column in columns)
        return np.zeros((0, width), dtype=np.float64)
    return np.vstack(rows)


class FeatureEngineer:
    """
    Composition of a fitted encoder and the assembler for a fixed column order.

    This is the single object the training, evaluation and inference code use
    to turn records into model input, so all three share one column order.
    """

    def __init__(self, encoder: CategoricalEncoder, columns: Optional[Sequence[str]] = None):
        if not encoder.is_fitted:
            raise EncoderNotFittedError("FeatureEngineer requires a fitted CategoricalEncoder")
        self.encoder = encoder
        self.columns = encoder.columns if columns is None else tuple(columns)

    @classmethod
    def fit(cls, training_records: Iterable[TravelRecord], columns: Sequence[str]) -> "FeatureEngineer":
        """Fits a fresh encoder on the training records and wraps it."""
        return cls(CategoricalEncoder().fit(training_records, columns))

    @property
    def feature_names(self) -> List[str]:
        return self.encoder.get_feature_names(self.columns)

    def transform_record(self, record) -> np.ndarray:
        return assemble_features(self.encoder.encode(record, self.columns), self.columns)

    def transform(self, records: Iterable) -> np.ndarray:
        return build_feature_matrix(records, self.encoder, self.columns)
