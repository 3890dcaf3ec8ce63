from typing import List, Sequence, Tuple

from sklearn.model_selection import train_test_split

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import RANDOM_STATE, TEST_SIZE, LOG_LEVEL
from fare_prediction.data.schema import TravelRecord
from fare_prediction.utils.logging import LoggerFactory

logger = LoggerFactory.create_logger(
    name=LOGGER_NAME,
    log_level=LOG_LEVEL,
    console_output=True,
    file_output=False
)


def split_records(records: Sequence[TravelRecord],
                  test_size: float = TEST_SIZE,
                  random_state: int = RANDOM_STATE) -> Tuple[List[TravelRecord], List[TravelRecord]]:
    """
    Partitions the records into a training set and a hold-out test set.

    Only used when the run has no separate test file. The split is
    reproducible for a given `random_state`, and the relative order of the
    records inside each partition is not guaranteed.

    Parameters:
    -----------
    records : sequence of TravelRecord
        Full dataset.
    test_size : float
        Proportion of records reserved for evaluation, in (0, 1).
    random_state : int
        Seed for deterministic splits.

    Returns:
    --------
    (train_records, test_records)
    """
    if not 0.0 < test_size < 1.0:
        raise ValueError(f"test_size must be in (0, 1), got {test_size}")

    records = list(records)
    if len(records) < 2:
        raise ValueError(f"At least 2 records are needed to split, got {len(records)}")

    train_records, test_records = train_test_split(
        records,
        test_size=test_size,
        random_state=random_state,
        shuffle=True
    )

    logger.info(f"Data split: {len(train_records):,} train / {len(test_records):,} test records")
    return list(train_records), list(test_records)
