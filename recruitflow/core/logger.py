"""Application logging for recruitflow.

Every module logs through the single ``recruitflow`` logger returned by
:func:`get_logger`, using ``component.event key=value`` messages such as
``importer.session submitted module=leads records=12``.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from .profiles import _work_dir


APP_LOGGER_NAME = "recruitflow"
_LOGGER: logging.Logger | None = None


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return a configured application logger writing to ./recruitflow/work/logs/app.log.

    Creates the directory if needed. Uses rotating file handler.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    if log_dir is None:
        base = _work_dir() / "logs"
    else:
        base = Path(log_dir)
    base.mkdir(parents=True, exist_ok=True)
    log_path = base / "app.log"

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    # rebuilt after a reset: drop handlers bound to the previous log dir
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def set_log_level(level_name: str) -> int:
    """Apply ``level_name`` (e.g. DEBUG/INFO) to the application logger and root."""

    level_value = logging.getLevelName(level_name.upper())
    if not isinstance(level_value, int):
        raise ValueError(f"Unknown log level: {level_name}")
    logging.getLogger().setLevel(level_value)
    get_logger().setLevel(level_value)
    return level_value
