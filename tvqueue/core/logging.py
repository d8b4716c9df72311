import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tvqueue.config import Settings, get_settings

LOG_DIR = Path("logs")
LOG_FILE_NAME = "tvqueue-server.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEV_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
PROD_FORMAT = "%(asctime)s|%(levelname)s|%(name)s|%(message)s"

# Client libraries whose INFO output drowns the room/queue transitions
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "postgrest", "realtime")


class ColoredFormatter(logging.Formatter):
    """Colours the level name for terminal output"""

    RESET = "\033[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[95m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        # The record is shared with the file handler; restore it after use
        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def build_formatter(settings: Settings) -> logging.Formatter:
    if settings.is_development:
        return ColoredFormatter(fmt=DEV_FORMAT, datefmt=DATE_FORMAT)
    return logging.Formatter(fmt=PROD_FORMAT, datefmt=DATE_FORMAT)


def build_file_handler(log_dir: Path = LOG_DIR) -> RotatingFileHandler:
    log_dir.mkdir(exist_ok=True)
    handler = RotatingFileHandler(
        filename=log_dir / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    # Plain format: no colour codes in files
    handler.setFormatter(logging.Formatter(fmt=PROD_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(settings: Settings | None = None) -> None:
    """
    Configure the root logger for the server.

    Call once at startup, before the FastAPI app is created. Development
    logs coloured lines to stdout; production logs pipe-separated lines to
    stdout and to a rotating file under ./logs.
    """
    settings = settings or get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(build_formatter(settings))
    root_logger.addHandler(console_handler)

    if settings.is_production:
        root_logger.addHandler(build_file_handler())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # uvicorn installs its own handlers; route its records through ours
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers.clear()


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, e.g. get_logger("RoomService")"""
    return logging.getLogger(name)
