"""Logging setup for running the outline service under uvicorn."""

from __future__ import annotations

import logging.config
import os
from pathlib import Path
from typing import Any, Dict

_logging_configured = False


def configure_logging() -> None:
    """Send ``outliner`` and uvicorn records to stderr and one rotating file.

    uvicorn's error and access loggers propagate into ``uvicorn``, so a single
    entry covers both. Called once from :func:`outliner.main.run`.
    """
    global _logging_configured
    if _logging_configured:
        return

    log_dir = Path(os.getenv("OUTLINER_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_level = os.getenv("OUTLINER_LOG_LEVEL", "INFO")
    handlers = ["stderr", "file"]

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "service": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(asctime)s %(levelprefix)s %(name)s: %(message)s",
                "use_colors": None,
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "service",
                "stream": "ext://sys.stderr",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "service",
                "filename": str(log_dir / os.getenv("OUTLINER_LOG_FILE", "outliner.log")),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 3,
                "encoding": "utf-8",
                "delay": True,
            },
        },
        "loggers": {
            "outliner": {"handlers": handlers, "level": log_level, "propagate": False},
            "uvicorn": {"handlers": handlers, "level": log_level, "propagate": False},
        },
    }

    logging.config.dictConfig(logging_config)
    _logging_configured = True


__all__ = ["configure_logging"]
