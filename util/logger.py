# util/logger.py
import copy
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from config.settings import Settings, settings as default_settings

logging.captureWarnings(True)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Third-party loggers pinned regardless of LOG_LEVEL
PINNED_LEVELS = {
    "multipart": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.INFO,
}


class ConsoleHandler(logging.StreamHandler):
    """stdout handler that colors the level name on its own copy of the record."""

    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    def format(self, record: logging.LogRecord) -> str:
        # Copy so the file handler still sees the plain level name
        colored = copy.copy(record)
        lvl = record.levelname
        colored.levelname = f"{self.COLORS.get(lvl, self.RESET)}{lvl}{self.RESET}"
        return super().format(colored)


def _file_handler(settings: Settings) -> RotatingFileHandler:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    return RotatingFileHandler(
        os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


def init_logger(settings: Settings = default_settings) -> logging.Logger:
    """
    Idempotent logger init:
    - Always logs to stdout, colored.
    - Also writes plain lines to LOG_DIR/LOG_FILE_NAME when LOG_TO_FILE is set,
      rotated by size (LOG_MAX_BYTES/LOG_BACKUP_COUNT).
    - Respects settings.LOG_LEVEL.
    """
    root = logging.getLogger()
    if getattr(root, "_bundlestore_inited", False):
        return logging.getLogger(settings.LOGGER_NAME)

    level = getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    root.setLevel(level)

    # Clear any default handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    handlers = [ConsoleHandler()]
    if settings.LOG_TO_FILE:
        handlers.append(_file_handler(settings))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)

    for name, pinned in PINNED_LEVELS.items():
        logging.getLogger(name).setLevel(pinned)

    root._bundlestore_inited = True  # type: ignore[attr-defined]
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug(
        "logger.init level=%s file=%s store=%s",
        logging.getLevelName(level),
        settings.LOG_TO_FILE,
        settings.STORE_PATH,
    )
    return logger
