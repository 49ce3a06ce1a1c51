from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from .settings import Settings

LOG_FILE_NAME = "todo_note.log"


# PUBLIC_INTERFACE
def setup_logging(settings: Settings) -> Path:
    """Configure Python + uvicorn logging to write to the console and a rotating log file.

    Returns the resolved log file path.

    Rotation:
      - Daily rotation at midnight.
      - Keep the last `settings.log_backup_count` rotated files.

    Safe to call more than once (it resets handlers).
    """
    log_dir = Path(settings.log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    level = getattr(logging, settings.log_level, logging.INFO)
    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    file_handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        interval=1,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(fmt)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(fmt)

    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.setLevel(level)
        lg.propagate = True

    if not settings.log_access:
        logging.getLogger("uvicorn.access").disabled = True

    logging.getLogger("todo_note").info(
        "Logging enabled (file=%s, level=%s, access=%s)",
        os.fspath(log_file),
        settings.log_level,
        settings.log_access,
    )
    return log_file
