"""
Path configuration and constants for the fare prediction project.
"""

from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
MODELS_DIR = PROJECT_ROOT / "models"
LOGS_DIR = PROJECT_ROOT / "logs"

# Input datasets (header row + 11 columns, see data/schema.py)
TRAIN_DATA = str(DATA_DIR / "nz-airfares-train.csv")
TEST_DATA = str(DATA_DIR / "nz-airfares-test.csv")

# Trained model archive (model + vocabularies + column order)
MODEL_PATH = str(MODELS_DIR / "AirTravelFareModel.joblib")

# Logging configuration
LOGGER_NAME = "fare_prediction_logger"

