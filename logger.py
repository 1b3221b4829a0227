# logger.py

import logging
import os
from typing import Optional

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str, to_file: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Return a named logger with a console handler and, optionally,
    a file handler. Handlers are attached once per logger name.
    """
    log = logging.getLogger(name)
    log.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in log.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(stream)

    if to_file:
        path = os.path.abspath(to_file)
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == path
                   for h in log.handlers):
            os.makedirs(os.path.dirname(path), exist_ok=True)
            handler = logging.FileHandler(path)
            handler.setFormatter(logging.Formatter(_FORMAT))
            log.addHandler(handler)

    return log
