"""JSON log output for session lifecycle events."""

import logging
from pythonjsonlogger import jsonlogger


def setup_logger(level: int = logging.DEBUG) -> logging.Logger:
    """Attach a JSON formatter to the root logger (once)."""
    logger = logging.getLogger()
    logger.setLevel(level)
    if any(isinstance(h.formatter, jsonlogger.JsonFormatter)
           for h in logger.handlers):
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    ))
    logger.addHandler(handler)
    return logger
