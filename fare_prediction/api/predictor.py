"""
Single-record inference with a persisted fare model.
"""

from datetime import datetime
from typing import Mapping, Optional, Sequence

from fare_prediction.api.schemas import PredictionResponse, TravelRequest
from fare_prediction.config.paths import LOGGER_NAME, MODEL_PATH
from fare_prediction.config.settings import LOG_LEVEL
from fare_prediction.data.schema import RECORD_FIELDS, TravelRecord
from fare_prediction.exceptions import StaleModelError
from fare_prediction.models.artifact import FareModelArtifact
from fare_prediction.utils.logging import get_console_logger

logger = get_console_logger(name=LOGGER_NAME, log_level=LOG_LEVEL)

# 18/12/2019,ZQN,10:20 AM,WLG,6:10 PM,7h 50m,(1 stop),4h 50m in AKL,,Air New Zealand,422
SAMPLE_TRAVEL = TravelRecord(
    travel_date="18/12/2019",
    departure_airport="ZQN",
    departure_time="10:20 AM",
    arrival_airport="WLG",
    arrival_time="6:10 PM",
    duration="7h 50m",
    direct="(1 stop)",
    transit="4h 50m in AKL",
    baggage="",
    airline="Air New Zealand",
    fare=422,
)

SAMPLE_TRAVELS = [
    # 18/12/2019,ZQN,9:35 AM,WLG,6:10 PM,8h 35m,(1 stop),5h 35m in AKL,,Air New Zealand,422
    TravelRecord(
        travel_date="18/12/2019",
        departure_airport="ZQN",
        departure_time="9:35 AM",
        arrival_airport="WLG",
        arrival_time="6:10 PM",
        duration="8h 35m",
        direct="(1 stop)",
        transit="5h 35m in AKL",
        baggage="",
        airline="Air New Zealand",
        fare=422,
    ),
    # 18/12/2019,ZQN,10:20 AM,WLG,6:40 PM,8h 20m,(1 stop),5h 20m in AKL,,Air New Zealand,422
    TravelRecord(
        travel_date="18/12/2019",
        departure_airport="ZQN",
        departure_time="10:20 AM",
        arrival_airport="WLG",
        arrival_time="6:40 PM",
        duration="8h 20m",
        direct="(1 stop)",
        transit="5h 20m in AKL",
        baggage="",
        airline="Air New Zealand",
        fare=422,
    ),
]


class FarePredictor:
    """
    Loads a persisted fare model and predicts single records.

    The record is encoded with the vocabularies and column order stored in the
    archive, never with a freshly fitted encoder.
    """

    def __init__(self, model_path: str = MODEL_PATH, artifact: Optional[FareModelArtifact] = None):
        """
        Args:
            model_path: Archive written by `FareModelArtifact.save`.
            artifact: Already loaded artifact; skips reading `model_path`.

        Raises:
            ModelLoadError: If the archive cannot be loaded.
        """
        self.model_path = str(model_path)
        self.artifact = artifact if artifact is not None else FareModelArtifact.load(model_path)

    @property
    def columns(self) -> tuple:
        return self.artifact.columns

    @property
    def model_version(self) -> str:
        return self.artifact.version

    def check_columns(self, record, columns: Optional[Sequence[str]] = None) -> None:
        """
        Verifies that a request matches the column layout of the model.

        Raises:
            StaleModelError: If `columns` differs from the fitted column order,
                or the record does not provide one of the fitted columns.
        """
        if columns is not None and tuple(columns) != self.columns:
            raise StaleModelError(
                f"Requested columns {list(columns)} do not match the model columns {list(self.columns)}",
                expected_columns=self.columns,
                actual_columns=columns,
            )

        if isinstance(record, Mapping):
            available = set(record.keys())
        else:
            available = {column for column in self.columns if hasattr(record, column)}

        missing = [column for column in self.columns if column not in available]
        if missing:
            raise StaleModelError(
                f"Record is missing columns the model was fitted with: {missing}",
                expected_columns=self.columns,
                actual_columns=sorted(available),
            )

    def _prepare(self, record, columns: Optional[Sequence[str]] = None) -> TravelRecord:
        """
        Checks the column layout and normalises the input to a `TravelRecord`,
        so mappings get the same whitespace stripping as CSV rows.
        """
        if isinstance(record, TravelRequest):
            record = record.to_record()

        self.check_columns(record, columns)

        if isinstance(record, Mapping):
            record = TravelRecord(**{key: value for key, value in record.items() if key in RECORD_FIELDS})
        return record

    def predict(self, record, columns: Optional[Sequence[str]] = None) -> float:
        """
        Predicts the fare of one record (`TravelRecord`, `TravelRequest` or mapping).
        """
        return self.artifact.predict_record(self._prepare(record, columns))

    def predict_single(self, record, actual_fare: Optional[float] = None) -> PredictionResponse:
        """
        Predicts one record and wraps the result with its metadata.

        When `record` is a `TravelRecord` and `actual_fare` is not given, the
        record's own fare is reported as the actual value.
        """
        if actual_fare is None and isinstance(record, TravelRecord):
            actual_fare = record.fare

        record = self._prepare(record)
        predicted_fare = self.artifact.predict_record(record)

        vector = self.artifact.features.transform_record(record)
        active = {
            name: float(value)
            for name, value in zip(self.artifact.features.feature_names, vector)
            if value != 0.0
        }

        return PredictionResponse(
            predicted_fare=round(predicted_fare, 4),
            actual_fare=actual_fare,
            model_version=self.model_version,
            prediction_timestamp=datetime.now(),
            input_features=active,
        )


def format_prediction(response: PredictionResponse) -> str:
    """Single predicted-vs-actual line of the console report."""
    actual = "n/a" if response.actual_fare is None else f"{response.actual_fare:g}"
    return f"Predicted fare: {response.predicted_fare:.4f}, actual fare: {actual}"
