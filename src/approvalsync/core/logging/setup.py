from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from .json_formatter import JSONFormatter

if TYPE_CHECKING:
    from approvalsync.core.config.settings import Settings

_LOGGER_NAME = "approvalsync"
_CONFIGURED_ATTR = "_approvalsync_json_logging"
_LOG_MAX_BYTES = 5_000_000
_LOG_BACKUP_COUNT = 5


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _CONFIGURED_ATTR, False)]


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(JSONFormatter())
    setattr(handler, _CONFIGURED_ATTR, True)
    logger.addHandler(handler)


def configure_logging(settings: Settings) -> logging.Logger:
    """Route the approvalsync logger hierarchy to stdout and, optionally, a rotating file.

    Safe to call more than once (worker and API share it); handlers are only
    added the first time for a given destination.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(settings.log_level)
    logger.propagate = False

    owned = _owned_handlers(logger)
    if not any(isinstance(handler, logging.StreamHandler) and not isinstance(handler, RotatingFileHandler) for handler in owned):
        _attach(logger, logging.StreamHandler(stream=sys.stdout))

    if settings.log_to_file:
        log_path = settings.log_path
        already = any(
            isinstance(handler, RotatingFileHandler) and handler.baseFilename == os.path.abspath(log_path)
            for handler in owned
        )
        if not already:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            _attach(
                logger,
                RotatingFileHandler(
                    filename=log_path,
                    maxBytes=_LOG_MAX_BYTES,
                    backupCount=_LOG_BACKUP_COUNT,
                    encoding="utf-8",
                ),
            )

    return logger
