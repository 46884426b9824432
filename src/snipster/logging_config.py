"""Logging configuration for Snipster."""
from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from pathlib import Path

LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <8} {name}:{line} {message}')


def configure_logging(path: Path | None, *, verbose: bool = False) -> None:
    """Configure loguru with appropriate level.

    The default stderr sink is always removed because it would corrupt the
    terminal display. When path is ``None`` logging is simply disabled.
    """
    logger.remove()
    if path is None:
        return
    level = 'DEBUG' if verbose else 'INFO'
    logger.add(
        path, level=level, format=LOG_FORMAT, rotation='1 MB', retention=3,
        encoding='utf-8')
