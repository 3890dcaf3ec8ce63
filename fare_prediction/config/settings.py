"""
Configuration settings for the fare prediction project.

Module-level constants hold the defaults of the sampled configuration; the
`PipelineConfig` structure carries them explicitly into every component so no
stage reads process-wide state.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from fare_prediction.config.paths import TRAIN_DATA, TEST_DATA, MODEL_PATH

# ============================================
# DATA CONFIGURATION
# ============================================
DELIMITER = ","
EXPECTED_COLUMNS = 11
RANDOM_STATE = 0

# ============================================
# OUTLIERS
# ============================================
# Probable data-entry errors (inclusive range kept for training)
FARE_LOWER_BOUND = 30.0
FARE_UPPER_BOUND = 1400.0

# ============================================
# FEATURES & TARGET
# ============================================
TARGET_FARE = "fare"

AIRFARE_CATEGORICAL_COLUMNS = (
    "departure_airport",
    "arrival_airport",
    "airline",
)

TAXIFARE_CATEGORICAL_COLUMNS = (
    "departure_airport",
    "arrival_airport",
    "direct",
    "baggage",
    "airline",
)

# ============================================
# MODEL HYPERPARAMETERS
# ============================================
# Hold-out fraction, only used when no test file is configured
TEST_SIZE = 0.2

DEFAULT_MODEL = "sdca"

SDCA_PARAMS = {
    "alpha": 0.0001,
    "max_iter": 1000,
    "tol": 1e-4,
    "eta0": 0.01,
}

LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Explicit configuration of one training/evaluation run.

    The same `categorical_columns` sequence is used at fit time and at predict
    time; it is persisted with the model for that reason.
    """

    variant: str = "airfare"
    train_data_path: str = TRAIN_DATA
    test_data_path: Optional[str] = TEST_DATA
    model_path: str = MODEL_PATH
    categorical_columns: Tuple[str, ...] = AIRFARE_CATEGORICAL_COLUMNS
    lower_bound: float = FARE_LOWER_BOUND
    upper_bound: float = FARE_UPPER_BOUND
    delimiter: str = DELIMITER
    expected_columns: int = EXPECTED_COLUMNS
    parse_temporal_fields: bool = False
    model_name: str = DEFAULT_MODEL
    model_params: Dict[str, float] = field(default_factory=dict)
    test_size: float = TEST_SIZE
    random_state: int = RANDOM_STATE
    log_level: str = LOG_LEVEL

    def __post_init__(self):
        # Tuples keep the column order hashable and immutable
        object.__setattr__(self, "categorical_columns", tuple(self.categorical_columns))

        if not self.categorical_columns:
            raise ValueError("At least one categorical column must be configured")
        if self.lower_bound > self.upper_bound:
            raise ValueError(
                f"lower_bound ({self.lower_bound}) must not exceed upper_bound ({self.upper_bound})"
            )
        if not 0.0 < self.test_size < 1.0:
            raise ValueError(f"test_size must be in (0, 1), got {self.test_size}")
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")

    def with_overrides(self, **overrides) -> "PipelineConfig":
        """Returns a copy with the given (non-None) fields replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


# One pipeline, parameterised by which columns are one-hot encoded and whether
# the temporal fields are validated as typed values.
VARIANTS = {
    "airfare": PipelineConfig(
        variant="airfare",
        categorical_columns=AIRFARE_CATEGORICAL_COLUMNS,
        parse_temporal_fields=False,
    ),
    "taxifare": PipelineConfig(
        variant="taxifare",
        categorical_columns=TAXIFARE_CATEGORICAL_COLUMNS,
        parse_temporal_fields=True,
    ),
}


def get_config(variant: str = "airfare", **overrides) -> PipelineConfig:
    """
    Resolves a preset configuration and applies per-run overrides.

    Raises:
        ValueError: If the variant is not one of `VARIANTS`.
    """
    if variant not in VARIANTS:
        raise ValueError(f"Unknown variant '{variant}'. Available: {sorted(VARIANTS)}")
    return VARIANTS[variant].with_overrides(**overrides)
