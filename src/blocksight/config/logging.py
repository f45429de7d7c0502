from __future__ import annotations

import logging
import sys
from typing import Dict, Optional

import colorlog

from blocksight.config import settings

_LOGGERS: Dict[str, logging.Logger] = {}

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(
    name: str,
    level: Optional[str] = None,
    color: Optional[bool] = None,
) -> logging.Logger:
    """
    Stdout logger, configured once per name.

    Level and color default to LOG_LEVEL / LOG_COLOR from settings.
    """
    if name in _LOGGERS:
        return _LOGGERS[name]

    level = (level or settings.LOG_LEVEL).upper()
    color = settings.LOG_COLOR if color is None else color

    if level not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}")

    if color:
        logger = colorlog.getLogger(name)
        handler: logging.Handler = colorlog.StreamHandler(sys.stdout)
        formatter: logging.Formatter = colorlog.ColoredFormatter(
            "%(log_color)s" + _FORMAT,
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    else:
        logger = logging.getLogger(name)
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(_FORMAT)

    logger.setLevel(_LEVELS[level])
    handler.setLevel(_LEVELS[level])
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    _LOGGERS[name] = logger
    return logger
