"""
Service logging: brief console output plus one detailed log file per run.

Each start opens logs/paper-engine_<timestamp>.log (from Settings.log_file)
at DEBUG, which includes per-term scoring from the ranker. Only the newest
KEEP_SESSION_LOGS session files are kept; a single session file rolls over
at SESSION_LOG_MAX_BYTES.
"""
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from .config import Settings

KEEP_SESSION_LOGS = 5
SESSION_LOG_MAX_BYTES = 10 * 1024 * 1024

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'


def session_logs(log_file: Path) -> List[Path]:
    """Earlier session logs for this base path, newest first"""
    return sorted(log_file.parent.glob(f"{log_file.stem}_*.log"), reverse=True)


def prune_session_logs(log_file: Path, keep: int = KEEP_SESSION_LOGS) -> None:
    # Leave room for the session about to start
    for old_log in session_logs(log_file)[keep - 1:]:
        try:
            old_log.unlink()
        except OSError as e:
            print(f"Could not remove old log {old_log}: {e}", file=sys.stderr)


def setup_logging(settings: Settings, file_level: int = logging.DEBUG) -> Path:
    """
    Route all loggers to the console and to a new session log file.

    Args:
        settings: Console level comes from settings.log_level (unknown
            names fall back to INFO), file location from settings.log_file
        file_level: Level for the session file

    Returns:
        Path of this session's log file
    """
    console_level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(console_level, int):
        console_level = logging.INFO

    log_file = Path(settings.log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    prune_session_logs(log_file)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_file.parent / f"{log_file.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    file_handler = RotatingFileHandler(
        session_log,
        maxBytes=SESSION_LOG_MAX_BYTES,
        backupCount=10,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Request lines stay in the file only
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log} ({logging.getLevelName(file_level)})"
    )
    return session_log
