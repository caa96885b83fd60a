"""Logging helpers."""

from __future__ import annotations

import logging
from typing import Optional

_PACKAGE_LOGGER = "bref_cli"
_LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    global _LOGGING_CONFIGURED
    if not _LOGGING_CONFIGURED:
        # boto3/botocore log credential lookups at INFO; keep third parties quiet.
        logging.basicConfig(
            level=logging.WARNING,
            format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
        )
        logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.INFO)
        _LOGGING_CONFIGURED = True
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Apply a level name such as ``DEBUG`` to the bref_cli loggers."""
    get_logger(_PACKAGE_LOGGER).setLevel(getattr(logging, level.upper(), logging.INFO))
