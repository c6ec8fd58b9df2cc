"""Logging setup."""

from __future__ import annotations

import logging

from qrwallet.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level
    logging.basicConfig(level=level, format=settings.logging.format)
    # SQL echo is controlled by the database settings, keep the engine logger quiet otherwise
    if not settings.database.echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
