# deal_checker/config/logging_config.py

"""Per-run timestamped logging for deal_checker.

A run writes everything at DEBUG to ``logs/run_<YYYYMMDD_HHMMSS>.log``:
batch ranges, rate-limit waits, provider responses and the traceback of
whatever aborted the run.  The console only shows warnings (duplicate
ASINs, lines without an ASIN, items a provider did not return) unless
``verbose`` is set.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from deal_checker.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# cloudscraper pulls in requests/urllib3, which log every connection
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )
    return handler


def setup_logging(verbose: bool = False) -> Path:
    """Attach the per-run file and console handlers to ``deal_checker``.

    Args:
        verbose: Show INFO records (batch progress, waits) on the console.

    Returns:
        Path of the log file for this run.  Repeated calls reuse the
        handlers already attached.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    project_logger = logging.getLogger("deal_checker")
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    project_logger.addHandler(_file_handler(log_file))
    project_logger.addHandler(
        _console_handler(logging.INFO if verbose else logging.WARNING)
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    project_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
