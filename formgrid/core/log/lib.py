"""Core logging implementation for formgrid.

The CLI configures the root logger once per run; library modules only ever
call `logging.getLogger(__name__)` and never configure handlers themselves.
"""

import logging
import sys
from typing import TextIO

from formgrid.config import get_log_level

__all__ = ["LOG_FORMAT", "get_logger", "resolve_level", "setup_logging"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: int | str | None) -> int:
    """Turn a level name or number into a logging level.

    None reads FORMGRID_LOG_LEVEL; unknown names resolve to INFO.
    """
    if level is None:
        level = get_log_level()
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str | None = None, stream: TextIO = sys.stderr) -> None:
    """Configure root logging for a CLI run.

    Args:
        level: Level number or name; defaults to FORMGRID_LOG_LEVEL.
        stream: Output stream.
    """
    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        stream=stream,
        force=True,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the formgrid namespace default."""
    return logging.getLogger(name or "formgrid")
