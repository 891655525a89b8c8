"""po_agent.logging_utils

One named logger for the whole service, shared by injection.

- `<log_dir>/po_agent.log`, rotated at 2 MB with 5 backups
- the same lines on the console next to uvicorn's access log
- no propagation to root, so uvicorn's own handlers do not print everything twice
"""

from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE = "po_agent.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def build_logger(log_dir: str, name: str = "po_agent", level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    # build_services may run more than once per process (reload, tests)
    if logger.handlers:
        return logger

    folder = Path(log_dir)
    folder.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(folder / LOG_FILE, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    console = logging.StreamHandler()
    for h in (file_handler, console):
        h.setFormatter(fmt)
        logger.addHandler(h)
    return logger
