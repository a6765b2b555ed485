from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVEL_ENV = "AMBIANCE_LOG_LEVEL"


def default_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    return getattr(logging, name, logging.WARNING)


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Attach one handler to the package logger; repeated calls only adjust the level."""
    logger = logging.getLogger("ambiance_engine")
    logger.setLevel(default_level() if level is None else level)
    if logger.handlers:
        return logger
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
