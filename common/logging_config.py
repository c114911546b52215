"""
Logging Configuration for the Spatial Value Library.

All modules obtain their logger through ``get_logger`` so output shares a
single format. Handlers are attached once per logger name; calling
``get_logger`` repeatedly is safe.
"""

import logging
import sys


_configured_loggers = set()

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: int = logging.WARNING) -> logging.Logger:
    """Get a logger configured for the spatial value library.
    
    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.
        
    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
        _configured_loggers.add(name)
    
    return logger


def set_log_level(level: int) -> None:
    """Set the level of every logger created through ``get_logger``.

    Parameters
    ----------
    level : int
        Logging level, e.g. ``logging.DEBUG`` to trace codec dispatch.
    """
    for name in _configured_loggers:
        logging.getLogger(name).setLevel(level)
