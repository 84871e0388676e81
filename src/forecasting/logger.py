import logging
import sys
from logging.handlers import RotatingFileHandler

from . import settings

LOG_FILE = "forecasting.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "forecasting", log_level: int | str = settings.LOG_LEVEL) -> logging.Logger:
    """
    Attach console and rotating-file output to the engine's logger.

    Module loggers below ``name`` (``forecasting.predictor`` and so on)
    propagate here. Calling it again returns the configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    if logger.handlers:
        return logger

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    handlers = [
        (logging.StreamHandler(sys.stdout), logging.Formatter("%(levelname)s %(message)s")),
        (
            RotatingFileHandler(
                settings.LOG_DIR / LOG_FILE, maxBytes=1_000_000, backupCount=2, encoding="utf-8"
            ),
            logging.Formatter(LOG_FORMAT),
        ),
    ]
    for handler, formatter in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
