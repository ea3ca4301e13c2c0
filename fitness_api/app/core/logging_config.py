"""
Logging setup for the fitness API.

``setup_logging`` is called once by ``create_app`` and by the command
line scripts.  Records go to stderr and, when ``LOG_FILE`` is set, to
that file as well.  Driver loggers are kept at WARNING unless the
application runs at DEBUG, otherwise every pool checkout is logged.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOISY_LOGGERS = ("pymongo", "pymongo.connection", "pymongo.serverSelection")


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach the handlers to the root logger.

    Does nothing when the root logger already has handlers, e.g. under
    pytest or when the app is created twice in one process.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"`` or ``"info"``.  Unknown names
        fall back to INFO.
    logfile : Optional[str]
        Extra destination for the same records.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root_level = logging.getLevelName(level.upper())
    if not isinstance(root_level, int):
        root_level = logging.INFO
    root.setLevel(root_level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).expanduser(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if root_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
