"""
Base interface for the fare regression models.

The regression solver is an external collaborator: any estimator that learns
from a numeric feature matrix and a label vector and maps a feature vector to a
scalar can back a model here. This module fixes that contract (fit / predict /
evaluate) so the pipeline never depends on a specific algorithm.
"""

from abc import ABC, abstractmethod
from typing import Dict

import numpy as np

from fare_prediction.config.settings import TARGET_FARE
from fare_prediction.evaluation.metrics import calculate_metrics


class BaseModel(ABC):
    """
    Abstract base class for the fare regressors.

    Subclasses wrap one scikit-learn estimator in `self.model` and implement
    `fit` and `predict`. Predictions are fares, so they are clipped at zero.
    """

    def __init__(self, model_name: str, target: str = TARGET_FARE):
        """
        Parameters:
        -----------
        model_name : str
            Identifier of the algorithm (e.g. 'sdca', 'ols').
        target : str
            Name of the label the model predicts.
        """
        self.model_name = model_name
        self.target = target
        self.is_trained = False
        self.model = None
        self.metrics = {}
        self.n_features = None

    @abstractmethod
    def fit(self, X: np.ndarray, y: np.ndarray) -> "BaseModel":
        """Fits the estimator to a feature matrix and its labels."""
        pass

    @abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        """Returns one non-negative prediction per row of `X`."""
        pass

    def evaluate(self, X: np.ndarray, y: np.ndarray) -> Dict[str, float]:
        """
        Scores the model on `(X, y)` and keeps the metrics for persistence.
        """
        predictions = self.predict(X)
        self.metrics = calculate_metrics(y, predictions)
        return self.metrics

    def get_params(self, deep=True) -> Dict[str, float]:
        """Hyperparameters of the underlying estimator."""
        if self.model is not None and hasattr(self.model, 'get_params'):
            return self.model.get_params(deep=deep)
        return {}

    def _check_input(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if self.n_features is not None and X.shape[1] != self.n_features:
            raise ValueError(
                f"{self.model_name} was trained on {self.n_features} features, got {X.shape[1]}"
            )
        return X

    def __repr__(self) -> str:
        state = "trained" if self.is_trained else "untrained"
        return f"{self.__class__.__name__}(model_name={self.model_name!r}, {state})"
