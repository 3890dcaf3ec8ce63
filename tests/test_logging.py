import logging

from fare_prediction.utils.logging import LoggerFactory, get_console_logger, get_file_logger, get_full_logger


def _close(logger):
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_logger_creation_is_idempotent():
    logger = get_console_logger("fare_prediction_test_idempotent", log_level="DEBUG")
    again = get_console_logger("fare_prediction_test_idempotent", log_level="ERROR")

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    _close(logger)


def test_file_logger_writes_timestamped_file(tmp_path):
    logger = get_file_logger("fare_prediction_test_file", log_dir=str(tmp_path))
    logger.info("records loaded")
    _close(logger)

    [log_file] = list(tmp_path.glob("fare_prediction_test_file_*.log"))
    assert "records loaded" in log_file.read_text(encoding="utf-8")


def test_full_logger_has_console_and_file_handlers(tmp_path):
    logger = get_full_logger("fare_prediction_test_full", log_dir=str(tmp_path))

    kinds = {type(handler) for handler in logger.handlers}
    assert kinds == {logging.StreamHandler, logging.FileHandler}
    _close(logger)


def test_set_level_updates_handlers(tmp_path):
    logger = get_console_logger("fare_prediction_test_level")
    LoggerFactory.add_file_handler(logger, log_dir=str(tmp_path))

    LoggerFactory.set_level(logger, "warning")

    assert logger.level == logging.WARNING
    assert all(handler.level == logging.WARNING for handler in logger.handlers)
    _close(logger)
