"""
Console and optional file logging for the puzzle.

The engine reports each move and undo at DEBUG and level start, restart and
wins at INFO under 'ballsort_core.engine'. The HTTP app reports level pack
loads under 'ballsort_core.app'. Both entry points call `setup_logging` with
BALLSORT_LOG_LEVEL / BALLSORT_LOG_FILE, and the CLI lets --log-level override
the level.
"""
from __future__ import annotations

import logging
import sys
from typing import List, Optional, Union

LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
DATE_FORMAT = '%H:%M:%S'


def level_from_name(level: Union[int, str]) -> int:
    """Accepts 10, 'debug' or 'DEBUG'. Unknown names raise ValueError."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f'unknown log level {level!r}')
    return value


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Sends 'ballsort_core' records to stdout and, when `log_file` is set,
    appends them to that file as well. Calling it again replaces the
    handlers installed by the previous call.
    """
    logger = logging.getLogger('ballsort_core')
    logger.setLevel(level_from_name(level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
