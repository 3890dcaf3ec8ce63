"""
Preprocessing of travel records before feature encoding.

Removes probable data-entry errors from the training set: records whose fare
lies outside a configured inclusive range are dropped. Dropping is not an
error; the number of removed records is tracked for the run summary.
"""

from typing import Iterable, Iterator, List

from fare_prediction.config.paths import LOGGER_NAME
from fare_prediction.config.settings import FARE_LOWER_BOUND, FARE_UPPER_BOUND, LOG_LEVEL
from fare_prediction.data.schema import TravelRecord
from fare_prediction.utils.logging import get_console_logger

logger = get_console_logger(name=LOGGER_NAME, log_level=LOG_LEVEL)


def _check_bounds(lower_bound: float, upper_bound: float) -> None:
    if lower_bound > upper_bound:
        raise ValueError(f"lower_bound ({lower_bound}) must not exceed upper_bound ({upper_bound})")


def filter_fare_outliers(records: Iterable[TravelRecord],
                         lower_bound: float = FARE_LOWER_BOUND,
                         upper_bound: float = FARE_UPPER_BOUND) -> Iterator[TravelRecord]:
    """
    Yields the records whose fare lies in `[lower_bound, upper_bound]`.

    Order-preserving and lazy. Applying it twice with the same bounds gives the
    same result as applying it once.

    Raises:
        ValueError: If `lower_bound > upper_bound`.
    """
    _check_bounds(lower_bound, upper_bound)
    return (record for record in records if lower_bound <= record.fare <= upper_bound)


class FareDataPreprocessor:
    """
    Batch wrapper around the outlier filter.

    Keeps the bounds of a run and the statistics of the last call in
    `preprocessing_stats`, so the training pipeline can report how much data
    the filter removed.
    """

    def __init__(self, lower_bound: float = FARE_LOWER_BOUND, upper_bound: float = FARE_UPPER_BOUND):
        _check_bounds(lower_bound, upper_bound)
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.preprocessing_stats = {}

        logger.debug(f"FareDataPreprocessor initialized with bounds [{lower_bound}, {upper_bound}]")

    def remove_outliers(self, records: Iterable[TravelRecord]) -> List[TravelRecord]:
        """
        Filters a record sequence and records the before/after counts.

        Returns:
            List[TravelRecord]: Records inside the fare range, in input order.
        """
        logger.info(f"=== OUTLIER REMOVAL (fare in [{self.lower_bound}, {self.upper_bound}]) ===")

        records = list(records)
        initial_count = len(records)
        kept = list(filter_fare_outliers(records, self.lower_bound, self.upper_bound))
        final_count = len(kept)
        removed_records = initial_count - final_count

        self.preprocessing_stats['outlier_removal'] = {
            'lower_bound': self.lower_bound,
            'upper_bound': self.upper_bound,
            'initial_count': initial_count,
            'final_count': final_count,
            'removed_records': removed_records,
            'removal_percentage': round(removed_records / initial_count * 100, 2) if initial_count else 0.0,
        }

        logger.info(f"Fare outliers removed: {removed_records:,}")
        logger.info(f"Remaining records: {final_count:,}")
        return kept

    def get_preprocessing_summary(self) -> dict:
        """Returns the statistics of the last run (empty dict if nothing ran yet)."""
        if not self.preprocessing_stats:
            logger.warning("No preprocessing statistics available")
        return dict(self.preprocessing_stats)
