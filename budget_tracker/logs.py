"""
Logging setup
=============

Everything goes to expenses.log next to the store.  With --verbose the
same records are also echoed to stderr through Rich.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s %(levelname)s %(name)s] %(message)s"


def _stderr_handler(**kwargs) -> RichHandler:
    return RichHandler(console=Console(stderr=True), **kwargs)


def build_config(log_file: Path, verbose: bool = False) -> dict:
    handlers = {
        "file": {
            "class": "logging.FileHandler",
            "filename": str(log_file),
            "encoding": "utf-8",
            "formatter": "file",
        },
    }
    if verbose:
        handlers["console"] = {
            "()": _stderr_handler,
            "formatter": "console",
            "show_path": False,
            "markup": False,
            "log_time_format": "%H:%M:%S",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "file": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%dT%H:%M:%S%z"},
            "console": {"format": "%(name)s - %(message)s"},
        },
        "handlers": handlers,
        "loggers": {
            "budget_tracker": {
                "handlers": list(handlers),
                "level": "DEBUG" if verbose else "INFO",
                "propagate": False,
            },
        },
    }


def configure_logging(log_file: Path, verbose: bool = False) -> None:
    logging.config.dictConfig(build_config(log_file, verbose))
