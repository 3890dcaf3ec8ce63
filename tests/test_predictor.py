import numpy as np
import pytest

from fare_prediction.api.predictor import SAMPLE_TRAVEL, SAMPLE_TRAVELS, FarePredictor, format_prediction
from fare_prediction.api.schemas import PredictionResponse, TravelRequest
from fare_prediction.data.features import build_feature_matrix
from fare_prediction.exceptions import ModelLoadError, StaleModelError
from fare_prediction.models.artifact import FareModelArtifact
from fare_prediction.models.trainer import train


@pytest.fixture
def model_path(tmp_path, train_records, fitted_encoder):
    X = build_feature_matrix(train_records, fitted_encoder)
    y = np.array([record.fare for record in train_records])
    artifact = FareModelArtifact(train(X, y, model_name="sdca"), fitted_encoder)
    return artifact.save(tmp_path / "fare.joblib")


@pytest.fixture
def predictor(model_path):
    return FarePredictor(model_path)


def test_sample_record_prediction_is_finite_and_non_negative(predictor):
    fare = predictor.predict(SAMPLE_TRAVEL)

    assert np.isfinite(fare)
    assert fare >= 0


def test_prediction_is_deterministic(predictor):
    assert [predictor.predict(record) for record in SAMPLE_TRAVELS] == [
        predictor.predict(record) for record in SAMPLE_TRAVELS
    ]


def test_predict_accepts_request_and_mapping(predictor):
    request = TravelRequest(**SAMPLE_TRAVEL.model_dump(exclude={"fare"}))

    expected = predictor.predict(SAMPLE_TRAVEL)
    assert predictor.predict(request) == expected
    assert predictor.predict(SAMPLE_TRAVEL.model_dump()) == expected


def test_mismatched_columns_raise_stale_model_error(predictor):
    with pytest.raises(StaleModelError) as excinfo:
        predictor.predict(SAMPLE_TRAVEL, columns=["airline", "departure_airport", "arrival_airport"])

    assert excinfo.value.expected_columns == ["departure_airport", "arrival_airport", "airline"]


def test_record_missing_fitted_column_raises(predictor):
    with pytest.raises(StaleModelError):
        predictor.predict({"departure_airport": "ZQN", "arrival_airport": "WLG"})


def test_predict_single_reports_metadata(predictor):
    response = predictor.predict_single(SAMPLE_TRAVEL)

    assert isinstance(response, PredictionResponse)
    assert response.actual_fare == 422.0
    assert response.model_version == "sdca_airfare_v1"
    assert set(response.input_features) == {
        "departure_airport=ZQN",
        "arrival_airport=WLG",
        "airline=Air New Zealand",
    }


def test_format_prediction(predictor):
    line = format_prediction(predictor.predict_single(SAMPLE_TRAVEL))
    assert line.startswith("Predicted fare: ")
    assert line.endswith("actual fare: 422")


def test_missing_archive_raises(tmp_path):
    with pytest.raises(ModelLoadError):
        FarePredictor(tmp_path / "nothing.joblib")


def test_mapping_values_are_stripped_like_csv_fields(predictor):
    padded = dict(SAMPLE_TRAVEL.model_dump(), departure_airport=" ZQN ", airline=" Air New Zealand")

    assert predictor.predict(padded) == predictor.predict(SAMPLE_TRAVEL)
    assert "airline=Air New Zealand" in predictor.predict_single(padded).input_features
