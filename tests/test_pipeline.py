import logging

import pytest

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import get_config
from fare_prediction.data.data_splitter import split_records
from fare_prediction.evaluation.metrics import EvaluationReport
from fare_prediction.exceptions import MalformedRowError
from fare_prediction.models.artifact import FareModelArtifact
from fare_prediction.pipelines.train_model import FareModelTrainer, build_parser, main
from fare_prediction.utils.logging import LoggerFactory

from conftest import TRAIN_ROWS, write_csv


def test_end_to_end_run(tmp_path, train_csv, test_csv, capsys):
    model_path = tmp_path / "models" / "fare.joblib"

    report = main([
        "--train-data", str(train_csv),
        "--test-data", str(test_csv),
        "--model-path", str(model_path),
    ])

    assert isinstance(report, EvaluationReport)
    assert report.n_samples == 3
    assert report.rmse >= 0
    assert model_path.exists()
    assert FareModelArtifact.load(model_path).columns == ("departure_airport", "arrival_airport", "airline")
    assert "RMSE" in capsys.readouterr().out


def test_run_with_holdout_split(tmp_path, train_csv):
    model_path = tmp_path / "fare.joblib"

    report = main([
        "--train-data", str(train_csv),
        "--split",
        "--model-path", str(model_path),
        "--model", "ols",
    ])

    assert report.n_samples == 2
    assert FareModelArtifact.load(model_path).version == "ols_airfare_v1"


def test_taxifare_variant(tmp_path, train_csv, test_csv):
    model_path = tmp_path / "taxi.joblib"

    main([
        "--variant", "taxifare",
        "--train-data", str(train_csv),
        "--test-data", str(test_csv),
        "--model-path", str(model_path),
    ])

    artifact = FareModelArtifact.load(model_path)
    assert "baggage" in artifact.columns
    assert artifact.variant == "taxifare"


def test_outliers_are_removed_before_training(tmp_path, train_csv, test_csv):
    config = get_config(
        train_data_path=str(train_csv),
        test_data_path=str(test_csv),
        model_path=str(tmp_path / "fare.joblib"),
        lower_bound=100.0,
        upper_bound=400.0,
    )
    trainer = FareModelTrainer(config)

    trainer.load_data()
    trainer.preprocess()

    assert all(100.0 <= record.fare <= 400.0 for record in trainer.train_records)
    # the held-out set is never filtered
    assert len(trainer.test_records) == 3


def test_no_records_left_after_filtering(tmp_path, train_csv, test_csv):
    config = get_config(
        train_data_path=str(train_csv),
        test_data_path=str(test_csv),
        lower_bound=5000.0,
        upper_bound=6000.0,
    )
    trainer = FareModelTrainer(config)
    trainer.load_data()

    with pytest.raises(ValueError):
        trainer.preprocess()


def test_malformed_training_file_fails_without_writing_model(tmp_path, test_csv):
    train_csv = write_csv(tmp_path / "bad.csv", TRAIN_ROWS[:2] + ["18/12/2019,ZQN,WLG"])
    model_path = tmp_path / "fare.joblib"

    with pytest.raises(MalformedRowError):
        main([
            "--train-data", str(train_csv),
            "--test-data", str(test_csv),
            "--model-path", str(model_path),
        ])
    assert not model_path.exists()


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.variant == "airfare"
    assert args.log_level == "INFO"
    assert not args.split


def test_split_records_is_reproducible(train_records):
    first = split_records(train_records, test_size=0.25, random_state=0)
    second = split_records(train_records, test_size=0.25, random_state=0)

    assert first == second
    assert len(first[1]) == 2
    assert sorted(r.fare for r in first[0] + first[1]) == sorted(r.fare for r in train_records)

    with pytest.raises(ValueError):
        split_records(train_records[:1])


def test_load_data_summarises_training_fares(tmp_path, train_csv, test_csv, caplog):
    config = get_config(train_data_path=str(train_csv), test_data_path=str(test_csv))
    trainer = FareModelTrainer(config)

    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        trainer.load_data()

    assert trainer.fare_summary["count"] == len(TRAIN_ROWS)
    assert trainer.fare_summary["min"] == 74.0
    assert trainer.fare_summary["max"] == 422.0
    assert "Training fares" in caplog.text


def test_config_log_level_is_applied(train_csv, test_csv):
    logger = logging.getLogger(LOGGER_NAME)
    previous = logging.getLevelName(logger.level)
    try:
        FareModelTrainer(get_config(train_data_path=str(train_csv), log_level="WARNING"))
        assert logger.level == logging.WARNING
    finally:
        LoggerFactory.set_level(logger, previous)
