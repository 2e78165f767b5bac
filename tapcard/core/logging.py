"""Logging setup for the Tapcard service."""

from __future__ import annotations

import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def _parse_level(value: str | None) -> int:
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | None = None, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once and return the ``tapcard`` logger.

    The level defaults to ``LOG_LEVEL`` from Settings. Calling it again is a
    no-op unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return logging.getLogger("tapcard")
    settings = get_settings()
    logging.basicConfig(
        level=_parse_level(level or settings.log_level),
        format=LOG_FORMAT,
        force=force,
    )
    _configured = True
    return logging.getLogger("tapcard")
