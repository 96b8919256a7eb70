"""Logging setup using rich."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_INITIALIZED = False


def setup_logging(level: str | int | None = None, rich_tracebacks: bool | None = None) -> None:
    """Install a rich console handler on the package logger.

    Safe to call more than once; later calls only change the level.
    """
    global _INITIALIZED

    from .config import get_settings

    config = get_settings().logging
    if level is None:
        level = config.level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    if rich_tracebacks is None:
        rich_tracebacks = config.rich_tracebacks

    logger = logging.getLogger("mlflow_rest")
    logger.setLevel(level)

    if not _INITIALIZED:
        handler = RichHandler(rich_tracebacks=rich_tracebacks, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
        logger.addHandler(handler)
        _INITIALIZED = True
