"""
Trainer entry point: feature matrix + labels in, fitted model out.
"""

from typing import Dict, Type

import numpy as np

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import DEFAULT_MODEL, LOG_LEVEL
from fare_prediction.models.base_model import BaseModel
from fare_prediction.models.linear import LinearRegressionModel, SdcaRegressionModel
from fare_prediction.utils.logging import get_console_logger

logger = get_console_logger(name=LOGGER_NAME, log_level=LOG_LEVEL)

MODEL_REGISTRY: Dict[str, Type[BaseModel]] = {
    'sdca': SdcaRegressionModel,
    'ols': LinearRegressionModel,
}


def create_model(model_name: str = DEFAULT_MODEL, **params) -> BaseModel:
    """
    Instantiates an untrained model by registry name.

    Raises:
        ValueError: If `model_name` is not registered.
    """
    if model_name not in MODEL_REGISTRY:
        raise ValueError(f"Unknown model '{model_name}'. Available: {sorted(MODEL_REGISTRY)}")
    return MODEL_REGISTRY[model_name](**params)


def train(feature_matrix, labels, model_name: str = DEFAULT_MODEL, **params) -> BaseModel:
    """
    Fits a regressor on encoded features.

    Parameters:
    -----------
    feature_matrix : array-like of shape (n_samples, n_features)
        One encoded feature vector per training record.
    labels : array-like of shape (n_samples,)
        Fares of the training records.
    model_name : str
        Registry key of the algorithm ('sdca' or 'ols').
    params : dict
        Hyperparameters forwarded to the model constructor.

    Returns:
    --------
    BaseModel
        Trained model exposing `predict`.
    """
    model = create_model(model_name, **params)

    X = np.asarray(feature_matrix, dtype=np.float64)
    logger.info(f"Training {model.model_name} model: Samples: {X.shape[0]}, "
                f"Features: {X.shape[1] if X.ndim == 2 else 'n/a'}")

    model.fit(X, labels)
    logger.info(f"✓ {model.model_name} trained successfully")
    return model
