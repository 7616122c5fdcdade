"""File logging for collector runs."""

import logging
from datetime import datetime
from pathlib import Path

from echobreaker.utils.files import get_logs_path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
MAX_LOG_FILES = 20
QUIET_LOGGERS = ('urllib3', 'httpx', 'httpcore', 'asyncio')


class RunFileHandler(logging.FileHandler):
    """File handler owned by the collector, replaced on every setup."""


def prune_logs(logs_dir: Path, keep: int = MAX_LOG_FILES) -> list[Path]:
    """Delete the oldest run logs so at most `keep` remain.

    Returns:
        The deleted paths.

    """
    logs = sorted(logs_dir.glob('collect_*.log'))
    stale = logs[: max(len(logs) - keep, 0)]
    for path in stale:
        path.unlink(missing_ok=True)
    return stale


def setup_local_logging(level: str = 'DEBUG', keep: int = MAX_LOG_FILES) -> Path:
    """Send stdlib logging to a per-run file in .echobreaker/logs/.

    Console output stays with rich. Calling this again swaps the previous
    run handler for a new one instead of stacking handlers.

    Args:
        level: Logging level name, e.g. 'DEBUG' or 'INFO'
        keep: Number of run logs retained, this one included

    Returns:
        Path of the new log file.

    """
    logs_dir = get_logs_path()
    logs_dir.mkdir(parents=True, exist_ok=True)
    prune_logs(logs_dir, keep=max(keep - 1, 0))

    log_file = logs_dir / f'collect_{datetime.now().strftime("%Y%m%d_%H%M%S_%f")}.log'
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.DEBUG

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if isinstance(h, RunFileHandler)]:
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = RunFileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(file_handler)
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return log_file
