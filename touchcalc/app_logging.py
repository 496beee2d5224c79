"""Structured log output."""

import logging
from typing import Union

from pythonjsonlogger import jsonlogger

_handler: Union[logging.Handler, None] = None


def setup_logger(level: Union[int, str] = logging.INFO) -> None:
    """
    Send JSON-formatted records from every logger to stderr.

    Calling this again replaces the handler installed by the previous call.
    """
    global _handler
    log_handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    log_handler.setFormatter(formatter)
    logger = logging.getLogger()
    if _handler is not None:
        logger.removeHandler(_handler)
    logger.addHandler(log_handler)
    _handler = log_handler
    if isinstance(level, str) and level.isdigit():
        level = int(level)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
