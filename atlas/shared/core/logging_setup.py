"""Root logger wiring for the Atlas front ends.

File handler: everything at the configured level (``LOG_LEVEL``, default DEBUG)
to ``<log_dir>/atlas.log``. Console handler: WARNING and above only.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from .configuration import LoggingConfig

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "watchdog")


def _level(name: str, default: int) -> int:
    return LOG_LEVEL_MAP.get(name.upper(), default)


def configure_logging(config: Optional[LoggingConfig] = None) -> Path:
    """Install file and console handlers on the root logger.

    Existing root handlers are removed so repeated calls (Streamlit reruns)
    do not duplicate output.

    Returns:
        Path of the log file
    """
    config = config or LoggingConfig()
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = log_dir / "atlas.log"

    file_level = _level(config.level, logging.DEBUG)
    console_level = _level(config.console_level, logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8',
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    ))
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured: file={log_file_path}, console={config.console_level}+")
    return log_file_path
