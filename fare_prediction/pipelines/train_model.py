"""
Fare model training pipeline.

Entry point of a one-shot run:

1. Load the training (and test) CSV files.
2. Remove fare outliers from the training set.
3. Fit the categorical encoder on the training set only.
4. Train the regressor on the encoded features.
5. Evaluate on the held-out set with the same encoder.
6. Save model + vocabularies + column order to one archive.
7. Reload the archive and predict the sample record.

Every error is fatal: it is logged and re-raised, no partial result is kept.
"""

import argparse
from dataclasses import replace
from typing import List, Optional

import numpy as np
import pandas as pd

from fare_prediction.api.predictor import SAMPLE_TRAVEL, FarePredictor, format_prediction
from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import LOG_LEVEL, PipelineConfig, VARIANTS, get_config
from fare_prediction.data.data_splitter import split_records
from fare_prediction.data.features import CategoricalEncoder, build_feature_matrix
from fare_prediction.data.ingest import load_travel_records, records_to_frame
from fare_prediction.data.preprocess import FareDataPreprocessor
from fare_prediction.data.schema import TravelRecord
from fare_prediction.evaluation.metrics import EvaluationReport, evaluate_model, print_metrics
from fare_prediction.models.artifact import FareModelArtifact
from fare_prediction.models.base_model import BaseModel
from fare_prediction.models.trainer import MODEL_REGISTRY, train
from fare_prediction.utils.logging import LoggerFactory

logger = LoggerFactory.create_logger(
    name=LOGGER_NAME,
    log_level=LOG_LEVEL,
    console_output=True,
    file_output=False
)


class FareModelTrainer:
    """
    Orchestrates loading, preprocessing, encoding, training, evaluation and
    persistence for one `PipelineConfig`.
    """

    def __init__(self, config: PipelineConfig):
        self.config = config

        self.train_records: List[TravelRecord] = []
        self.test_records: List[TravelRecord] = []
        self.encoder: Optional[CategoricalEncoder] = None
        self.model: Optional[BaseModel] = None
        self.report: Optional[EvaluationReport] = None
        self.model_path: Optional[str] = None
        self.preprocessor = FareDataPreprocessor(config.lower_bound, config.upper_bound)
        self.fare_summary: Optional[pd.Series] = None

        LoggerFactory.set_level(logger, config.log_level)

    def _read(self, path: str) -> List[TravelRecord]:
        return load_travel_records(
            path,
            delimiter=self.config.delimiter,
            expected_columns=self.config.expected_columns,
            parse_temporal_fields=self.config.parse_temporal_fields,
        )

    def load_data(self):
        """
        Reads the training file and the test file. Without a test file, a
        hold-out split of the training file is used instead.
        """
        logger.info("=== LOADING DATA ===")
        records = self._read(self.config.train_data_path)

        if self.config.test_data_path:
            self.train_records = records
            self.test_records = self._read(self.config.test_data_path)
        else:
            logger.info("No test file configured, splitting the training file")
            self.train_records, self.test_records = split_records(
                records,
                test_size=self.config.test_size,
                random_state=self.config.random_state,
            )

        logger.info(f"✓ Train records: {len(self.train_records):,}")
        logger.info(f"✓ Test records: {len(self.test_records):,}")

        self.fare_summary = records_to_frame(self.train_records)["fare"].describe()
        logger.info(f"Training fares:\n{self.fare_summary.to_string()}")
        return self.train_records, self.test_records

    def preprocess(self) -> List[TravelRecord]:
        """Removes fare outliers from the training set only."""
        self.train_records = self.preprocessor.remove_outliers(self.train_records)
        if not self.train_records:
            raise ValueError(
                f"No training records left in fare range [{self.config.lower_bound}, {self.config.upper_bound}]"
            )
        return self.train_records

    def fit_features(self) -> np.ndarray:
        """Fits the encoder on the training records and returns the training matrix."""
        logger.info("=== ENCODING FEATURES ===")
        self.encoder = CategoricalEncoder().fit(self.train_records, self.config.categorical_columns)
        return build_feature_matrix(self.train_records, self.encoder)

    def train(self, X_train: np.ndarray) -> BaseModel:
        logger.info("=============== Training the model ===============")
        y_train = np.array([record.fare for record in self.train_records], dtype=np.float64)
        self.model = train(X_train, y_train, model_name=self.config.model_name, **self.config.model_params)
        return self.model

    def evaluate(self) -> EvaluationReport:
        logger.info("===== Evaluating Model's accuracy with Test data =====")
        self.report = evaluate_model(self.model, self.encoder, self.test_records)

        logger.info(f"  R2:   {self.report.r2:.4f}")
        logger.info(f"  MAE:  {self.report.mae:.4f}")
        logger.info(f"  RMSE: {self.report.rmse:.4f}")
        logger.info(f"  Loss: {self.report.loss:.4f}")
        return self.report

    def save_model(self) -> str:
        artifact = FareModelArtifact(
            self.model,
            self.encoder,
            variant=self.config.variant,
            metrics=self.report.as_dict() if self.report is not None else None,
        )
        self.model_path = artifact.save(self.config.model_path)
        return self.model_path

    def run_sample_prediction(self, record: TravelRecord = SAMPLE_TRAVEL):
        """Reloads the saved archive and predicts one known record."""
        predictor = FarePredictor(self.model_path)
        response = predictor.predict_single(record)
        logger.info(format_prediction(response))
        return response

    def run(self) -> EvaluationReport:
        """Executes the whole pipeline and returns the evaluation report."""
        logger.info(f"🚀 Starting fare model pipeline (variant: {self.config.variant})")

        self.load_data()
        self.preprocess()
        X_train = self.fit_features()
        self.train(X_train)
        self.evaluate()
        self.save_model()
        self.run_sample_prediction()

        logger.info("✅ Fare model pipeline completed successfully!")
        return self.report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Fare prediction training pipeline')

    parser.add_argument(
        '--variant',
        choices=sorted(VARIANTS),
        default='airfare',
        help='Preset: airfare (string fields) or taxifare (typed temporal fields, more columns)'
    )
    parser.add_argument('--train-data', help='Training CSV file')
    parser.add_argument('--test-data', help='Test CSV file')
    parser.add_argument(
        '--split',
        action='store_true',
        help='Ignore the test file and hold out part of the training file'
    )
    parser.add_argument('--model-path', help='Output model archive')
    parser.add_argument('--model', choices=sorted(MODEL_REGISTRY), help='Regression algorithm')
    parser.add_argument('--lower-bound', type=float, help='Lowest fare kept for training')
    parser.add_argument('--upper-bound', type=float, help='Highest fare kept for training')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=LOG_LEVEL,
        help='Logging verbosity'
    )
    parser.add_argument('--log-file', action='store_true', help='Also write the log to the logs directory')
    return parser


def main(argv=None) -> EvaluationReport:
    args = build_parser().parse_args(argv)

    if args.log_file:
        LoggerFactory.add_file_handler(logger)

    config = get_config(
        args.variant,
        train_data_path=args.train_data,
        test_data_path=args.test_data,
        model_path=args.model_path,
        model_name=args.model,
        lower_bound=args.lower_bound,
        upper_bound=args.upper_bound,
        log_level=args.log_level,
    )
    if args.split:
        config = replace(config, test_data_path=None)

    try:
        trainer = FareModelTrainer(config)
        report = trainer.run()
    except Exception as e:
        logger.error(f"❌ Fare model pipeline failed: {e}")
        raise

    print_metrics(report, title=f"Regression metrics ({config.model_name}, {config.variant})")
    return report


if __name__ == "__main__":
    main()
