"""Logging setup for the PokePC backend.

All modules log through ``logging.getLogger(__name__)``; this module attaches a
single stream handler to the ``pokepc`` logger so app, services and CLI share
one format.
"""
import logging
from typing import Union

PROJECT_LOGGER = 'pokepc'
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(PROJECT_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    # create_app may run many times in one process (tests); keep one handler
    if not any(getattr(h, '_pokepc_handler', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._pokepc_handler = True
        logger.addHandler(handler)
    return logger
