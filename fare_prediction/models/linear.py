"""
Linear regression models for fare prediction.

`SdcaRegressionModel` is the default trainer: an L2-regularized linear model
fitted by stochastic gradient descent over shuffled samples.
`LinearRegressionModel` (ordinary least squares) is a drop-in alternative.
"""

import numpy as np
from sklearn.linear_model import LinearRegression, SGDRegressor

from fare_prediction.config.settings import RANDOM_STATE, SDCA_PARAMS, TARGET_FARE
from fare_prediction.models.base_model import BaseModel


def _check_training_data(X, y):
    X = np.asarray(X, dtype=np.float64)
    y = np.ravel(np.asarray(y, dtype=np.float64))

    if X.ndim != 2:
        raise ValueError(f"Feature matrix must be 2-dimensional, got shape {X.shape}")
    if X.shape[0] == 0:
        raise ValueError("Cannot train on an empty feature matrix")
    if X.shape[0] != y.shape[0]:
        raise ValueError(f"Feature matrix has {X.shape[0]} rows but {y.shape[0]} labels were given")
    return X, y


class SdcaRegressionModel(BaseModel):
    def __init__(self, target: str = TARGET_FARE,
                 alpha: float = SDCA_PARAMS['alpha'],
                 max_iter: int = SDCA_PARAMS['max_iter'],
                 tol: float = SDCA_PARAMS['tol'],
                 eta0: float = SDCA_PARAMS['eta0'],
                 random_state: int = RANDOM_STATE,
                 **kwargs):
        """
        Initializes the regularized linear regressor.

        Parameters:
        -----------
        target : str
            Label to predict.
        alpha : float
            L2 regularization strength.
        max_iter : int
            Maximum number of passes over the training data.
        tol : float
            Stopping criterion on the training loss improvement.
        eta0 : float
            Initial learning rate.
        random_state : int
            Seed for the sample shuffling, so runs are repeatable.
        kwargs : dict
            Additional arguments for sklearn's SGDRegressor.
        """
        super().__init__('sdca', target)

        self.model = SGDRegressor(
            loss='squared_error',
            penalty='l2',
            alpha=alpha,
            max_iter=max_iter,
            tol=tol,
            eta0=eta0,
            random_state=random_state,
            **kwargs
        )

    def fit(self, X, y):
        X, y = _check_training_data(X, y)
        self.model.fit(X, y)
        self.n_features = X.shape[1]
        self.is_trained = True
        return self

    def predict(self, X) -> np.ndarray:
        """
        Linear predictions, clipped at zero since a fare cannot be negative.
        """
        if not self.is_trained:
            raise ValueError("Model must be trained before making predictions")

        predictions = self.model.predict(self._check_input(X))
        return np.maximum(predictions, 0)


class LinearRegressionModel(BaseModel):
    def __init__(self, target: str = TARGET_FARE,
                 fit_intercept: bool = True,
                 positive: bool = False,
                 **kwargs):
        """
        Ordinary least squares. Used as a baseline against the regularized model.

        Parameters:
        -----------
        target : str
            Label to predict.
        fit_intercept : bool
            Whether to fit a bias term.
        positive : bool
            Force non-negative coefficients.
        """
        super().__init__('ols', target)

        self.model = LinearRegression(
            fit_intercept=fit_intercept,
            positive=positive,
            **kwargs
        )

    def fit(self, X, y):
        X, y = _check_training_data(X, y)
        self.model.fit(X, y)
        self.n_features = X.shape[1]
        self.is_trained = True
        return self

    def predict(self, X) -> np.ndarray:
        if not self.is_trained:
            raise ValueError("Model must be trained before making predictions")

        predictions = self.model.predict(self._check_input(X))
        return np.maximum(predictions, 0)
