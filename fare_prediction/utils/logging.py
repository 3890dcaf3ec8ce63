"""
Logging utilities.

Centralises logger creation so every stage of the fare pipeline (ingestion,
preprocessing, training, evaluation, inference) writes with the same format and
level, either to the console, to a timestamped file, or both.
"""

import logging
from datetime import datetime
from pathlib import Path

from fare_prediction.config.paths import LOGS_DIR

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LoggerFactory:
    """
    Builds configured `logging.Logger` instances.

    Creation is idempotent: a logger that already has handlers is returned
    untouched, so modules importing the shared logger do not stack duplicate
    handlers.
    """

    @staticmethod
    def create_logger(
        name: str,
        log_level: str = "INFO",
        log_dir: str = None,
        console_output: bool = True,
        file_output: bool = False,
        log_format: str = None
    ) -> logging.Logger:
        """
        Creates (or returns the existing) logger called `name`.

        Args:
            name (str): Logger identifier, usually `LOGGER_NAME`.
            log_level (str): Minimum level ('DEBUG', 'INFO', 'WARNING', 'ERROR').
            log_dir (str, optional): Directory for log files. Defaults to `LOGS_DIR`.
            console_output (bool): Attach a stream handler (stderr).
            file_output (bool): Attach a file handler writing `<name>_<timestamp>.log`.
            log_format (str, optional): Format string for every handler.

        Returns:
            logging.Logger: Configured logger.
        """
        logger = logging.getLogger(name)

        if logger.handlers:
            return logger

        level = getattr(logging, log_level.upper(), logging.INFO)
        logger.setLevel(level)

        formatter = logging.Formatter(log_format or DEFAULT_LOG_FORMAT)

        if console_output:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if file_output:
            LoggerFactory.add_file_handler(logger, log_dir=log_dir, log_format=log_format)

        return logger

    @staticmethod
    def add_file_handler(logger: logging.Logger, log_dir: str = None, log_format: str = None) -> Path:
        """
        Attaches a file handler writing `<name>_<timestamp>.log` to an existing logger.

        Used when a console logger created at import time must also be persisted
        for a command line run.

        Returns:
            Path: The log file path.
        """
        log_path = Path(log_dir) if log_dir is not None else LOGS_DIR
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_filepath = log_path / f"{logger.name}_{timestamp}.log"

        file_handler = logging.FileHandler(log_filepath, encoding='utf-8')
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))
        logger.addHandler(file_handler)
        return log_filepath

    @staticmethod
    def set_level(logger: logging.Logger, log_level: str) -> logging.Logger:
        """Changes the level of a logger and all its handlers."""
        level = getattr(logging, log_level.upper(), logging.INFO)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger


def get_console_logger(name: str, log_level: str = "INFO") -> logging.Logger:
    """Logger writing to the console only. Used by the library modules."""
    return LoggerFactory.create_logger(
        name=name,
        log_level=log_level,
        console_output=True,
        file_output=False
    )


def get_file_logger(name: str, log_level: str = "INFO", log_dir: str = None) -> logging.Logger:
    """Logger writing to a timestamped file only."""
    return LoggerFactory.create_logger(
        name=name,
        log_level=log_level,
        log_dir=log_dir,
        console_output=False,
        file_output=True
    )


def get_full_logger(name: str, log_level: str = "INFO", log_dir: str = None) -> logging.Logger:
    """Console + file logger, used by the command line training run."""
    return LoggerFactory.create_logger(
        name=name,
        log_level=log_level,
        log_dir=log_dir,
        console_output=True,
        file_output=True
    )
