"""JSON logger shared by the API and the scan processor."""

import logging

from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL


def get_logger(name: str) -> logging.Logger:
    """Configure a JSON logger once per name and reuse it."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter("%(levelname)s %(name)s %(message)s %(asctime)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)
    logger.propagate = False
    return logger
