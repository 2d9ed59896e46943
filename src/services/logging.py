"""Root logger setup shared by the API server and the fee CLI.

The server logs to stdout and to LOG_FILE; the CLI passes no file and
logs to stdout only. LOG_LEVEL picks the level for both.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_level(name: Optional[str]) -> int:
    """Resolve a level name such as "warning"; unknown names mean INFO."""
    return logging.getLevelNamesMapping().get((name or "").upper(), logging.INFO)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Replace the root logger's handlers with stdout and an optional file.

    Args:
        level: Level name, usually Settings.log_level
        log_file: Log file path; its directory is created on demand
    """
    log_level = parse_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # Statement echo only at DEBUG
    if log_level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["setup_logging", "parse_level"]
