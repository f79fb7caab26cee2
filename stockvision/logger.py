import logging
import sys
from logging.handlers import RotatingFileHandler

from . import settings

# pdfminer (under pdfplumber) reports every font/glyph oddity of the source PDFs.
_NOISY_LOGGERS = ("pdfminer", "urllib3")


def setup_logger(name: str = None, log_level: int | str | None = None) -> logging.Logger:
    """
    Console + rotating file logging for the runner scripts.
    Library modules only call logging.getLogger(__name__) and inherit from here.
    """
    log_level = log_level or settings.LOG_LEVEL
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / "app.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    return logger
