import logging

from forecasting import settings
from forecasting.logger import setup_logger


def test_setup_logger_is_idempotent_and_writes_to_log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")
    name = "forecasting.test_setup_logger"

    logger = setup_logger(name, logging.DEBUG)
    try:
        assert setup_logger(name, logging.DEBUG) is logger
        assert len(logger.handlers) == 2

        logger.info("restock queue ready")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "forecasting.log"
        assert "restock queue ready" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
