"""Package logger and its per-command setup.

The console writer also reports through ``log``, so a console level above INFO
hides rendered results.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from NdlSearch.config.runtime import RuntimeConfig

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Transport loggers from the requests stack.
_NOISY_LOGGERS = ("urllib3",)

log = logging.getLogger("NdlSearch")


def configure_logging(config: RuntimeConfig, *, action: str) -> Path | None:
    """Reset the ``NdlSearch`` logger for one CLI command.

    The console handler honours ``config.level``. With ``config.to_file`` a
    DEBUG log is also written to ``<dir>/<action>-<YYYYmmdd-HHMMSS>.log``.

    Returns:
        The log file path, or None when file logging is off.
    """
    console_level = logging.getLevelName(config.level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handlers: list[logging.Handler] = [console]

    log_path: Path | None = None
    if config.to_file:
        log_dir = Path(config.dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / f"{action}-{datetime.now():%Y%m%d-%H%M%S}.log"
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        handlers.append(file_handler)

    for handler in log.handlers:
        handler.close()
    log.handlers = handlers
    log.setLevel(logging.DEBUG if config.to_file else console_level)
    log.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if console_level == logging.DEBUG else logging.WARNING)

    log.debug("Logging configured for %s (level=%s, file=%s)", action, config.level, log_path)
    return log_path
