import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
# Exported catalog and transaction tables are read from here.
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Forecast Parameters ---
FORECAST_WINDOW_DAYS = int(os.getenv("FORECAST_WINDOW_DAYS", "90"))
MIN_TRANSACTIONS_REQUIRED = int(os.getenv("MIN_TRANSACTIONS_REQUIRED", "2"))
