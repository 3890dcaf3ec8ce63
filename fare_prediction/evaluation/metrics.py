"""
Metrics and Model Evaluation Module.

Computes the regression indicators used to judge a fare model on held-out data:
R², mean absolute error, root mean squared error and the squared-error loss.
The records are encoded with the encoder fitted on the training set, so
categories unseen during training contribute all-zero blocks.
"""

from dataclasses import asdict, dataclass
from typing import Iterable, Optional, Sequence

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from fare_prediction.data.features import build_feature_matrix
from fare_prediction.exceptions import EmptyEvaluationSetError


def calculate_metrics(y_true, y_pred) -> dict:
    """
    Calculates the regression metrics between true and predicted fares.

    Parameters:
    -----------
    y_true : array-like
        Actual fares.
    y_pred : array-like
        Model predictions.

    Returns:
    --------
    dict
        `r2`, `mae`, `mse`, `rmse` and `loss` (the mean squared error).

    Raises:
    -------
    EmptyEvaluationSetError
        If there are no samples.
    """
    # Flatten (N, 1) shapes to avoid broadcasting errors
    y_true = np.ravel(np.asarray(y_true, dtype=np.float64))
    y_pred = np.ravel(np.asarray(y_pred, dtype=np.float64))

    if y_true.size == 0:
        raise EmptyEvaluationSetError("Cannot compute metrics over an empty evaluation set")

    mae = mean_absolute_error(y_true, y_pred)
    mse = mean_squared_error(y_true, y_pred)

    # R² is undefined without variance in y_true (one sample, or all fares
    # equal): 1.0 for a perfect fit, 0.0 otherwise
    if y_true.size < 2 or np.all(y_true == y_true[0]):
        r2 = 1.0 if mse == 0.0 else 0.0
    else:
        r2 = r2_score(y_true, y_pred)

    rmse = np.sqrt(mse)

    return {
        "r2": float(r2),
        "mae": float(mae),
        "mse": float(mse),
        "rmse": float(rmse),
        "loss": float(mse),
    }


@dataclass(frozen=True)
class EvaluationReport:
    """Aggregate metrics of one evaluation call."""

    r2: float
    mae: float
    rmse: float
    loss: float
    n_samples: int

    @classmethod
    def from_predictions(cls, y_true, y_pred) -> "EvaluationReport":
        metrics = calculate_metrics(y_true, y_pred)
        return cls(
            r2=metrics["r2"],
            mae=metrics["mae"],
            rmse=metrics["rmse"],
            loss=metrics["loss"],
            n_samples=int(np.size(y_true)),
        )

    def as_dict(self) -> dict:
        return asdict(self)


def evaluate_model(model, encoder, records: Iterable, columns: Optional[Sequence[str]] = None) -> EvaluationReport:
    """
    Encodes held-out records, predicts, and scores against their fares.

    Parameters:
    -----------
    model : BaseModel
        Trained regressor.
    encoder : CategoricalEncoder
        Encoder fitted on the training records.
    records : iterable of TravelRecord
        Held-out set.
    columns : sequence of str, optional
        Column order; defaults to the encoder's fitted order.

    Raises:
    -------
    EmptyEvaluationSetError
        If `records` is empty.
    """
    records = list(records)
    if not records:
        raise EmptyEvaluationSetError("Held-out set is empty; nothing to evaluate")

    X = build_feature_matrix(records, encoder, columns)
    y_true = np.array([record.fare for record in records], dtype=np.float64)
    y_pred = model.predict(X)

    report = EvaluationReport.from_predictions(y_true, y_pred)
    model.metrics = report.as_dict()
    return report


def print_metrics(metrics, title: str = "Model Metrics") -> None:
    """
    Prints the evaluation results as a block for the console.

    Accepts an `EvaluationReport` or a metrics dict; R², MAE, RMSE and Loss
    come first, any other numeric entry after them.
    """
    if isinstance(metrics, EvaluationReport):
        metrics = metrics.as_dict()

    print(f"\n{'=' * 50}")
    print(f"{title}")
    print(f"{'=' * 50}")

    order = ["r2", "mae", "rmse", "loss"]
    labels = {"r2": "R2", "mae": "MAE", "rmse": "RMSE", "loss": "LOSS"}

    for key in order:
        if key in metrics:
            print(f"{labels[key]:10s}: {metrics[key]:>14.4f}")

    for key, value in metrics.items():
        if key not in order:
            print(f"{key.upper():10s}: {value:>14.4f}")

    print(f"{'=' * 50}\n")
