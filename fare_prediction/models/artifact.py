"""
Persisted fare model.

A `FareModelArtifact` bundles everything inference needs to re-encode a record
exactly as during training: the fitted regressor, the per-column vocabularies,
the declared column order, and the schema version of the record layout.
"""

import os
import pickle
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

import joblib
import numpy as np

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import LOG_LEVEL
from fare_prediction.data.features import CategoricalEncoder, FeatureEngineer
from fare_prediction.data.schema import SCHEMA_VERSION
from fare_prediction.exceptions import ModelLoadError
from fare_prediction.models.base_model import BaseModel
from fare_prediction.utils.logging import get_console_logger

logger = get_console_logger(name=LOGGER_NAME, log_level=LOG_LEVEL)

_REQUIRED_KEYS = ('schema_version', 'model', 'encoder')


class FareModelArtifact:
    """
    Trained model + fitted encoder + column order, saved and loaded as one unit.

    Once built, the artifact is only read, so one instance can serve several
    predictions concurrently.
    """

    def __init__(self, model: BaseModel, encoder: CategoricalEncoder,
                 columns: Optional[Sequence[str]] = None, variant: str = "airfare",
                 metrics: Optional[dict] = None, created_at: Optional[str] = None):
        if not model.is_trained:
            raise ValueError("The model must be trained before building an artifact")

        self.model = model
        self.encoder = encoder
        self.features = FeatureEngineer(encoder, columns)
        self.variant = variant
        self.metrics = dict(metrics) if metrics is not None else dict(model.metrics)
        self.created_at = created_at or datetime.now().isoformat()
        self.schema_version = SCHEMA_VERSION

    @property
    def columns(self) -> tuple:
        return self.features.columns

    @property
    def version(self) -> str:
        return f"{self.model.model_name}_{self.variant}_v{self.schema_version}"

    def predict_records(self, records: Iterable) -> np.ndarray:
        return self.model.predict(self.features.transform(records))

    def predict_record(self, record) -> float:
        return float(self.model.predict(self.features.transform_record(record))[0])

    def save(self, path) -> str:
        """
        Writes the artifact to `path`.

        The payload is dumped into a temporary sibling file inside a `with`
        block and then moved over `path`, so an interrupted write never leaves a
        truncated model file behind.

        Returns:
            str: Path of the written file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            'schema_version': self.schema_version,
            'model': self.model,
            'encoder': self.encoder.to_dict(),
            'columns': list(self.columns),
            'variant': self.variant,
            'metrics': self.metrics,
            'created_at': self.created_at,
        }

        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            with open(tmp_path, 'wb') as f:
                joblib.dump(payload, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

        logger.info(f"The model is saved to {path}")
        return str(path)

    @classmethod
    def load(cls, path) -> "FareModelArtifact":
        """
        Reads an artifact written by `save`.

        Raises:
            ModelLoadError: If the file is missing, unreadable, corrupt, or was
                written for another record schema version.
        """
        path = Path(path)
        try:
            with open(path, 'rb') as f:
                payload = joblib.load(f)
        except FileNotFoundError as e:
            raise ModelLoadError(path, "file not found") from e
        except (OSError, EOFError, pickle.UnpicklingError, ValueError, KeyError,
                AttributeError, ImportError, IndexError, TypeError) as e:
            raise ModelLoadError(path, f"corrupt or unreadable archive ({type(e).__name__}: {e})") from e

        if not isinstance(payload, dict) or any(key not in payload for key in _REQUIRED_KEYS):
            raise ModelLoadError(path, "archive does not contain a fare model")

        if payload['schema_version'] != SCHEMA_VERSION:
            raise ModelLoadError(
                path, f"schema version {payload['schema_version']} is not supported (expected {SCHEMA_VERSION})"
            )

        model = payload['model']
        if not isinstance(model, BaseModel) or not model.is_trained:
            raise ModelLoadError(path, "archive does not contain a trained model")

        try:
            encoder = CategoricalEncoder.from_dict(payload['encoder'])
            artifact = cls(
                model,
                encoder,
                columns=payload.get('columns'),
                variant=payload.get('variant', 'airfare'),
                metrics=payload.get('metrics', {}),
                created_at=payload.get('created_at'),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ModelLoadError(path, f"invalid encoder data ({e})") from e

        logger.info(f"Model {artifact.version} loaded from {path}")
        return artifact
