"""Centralized logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module wires
those loggers to a console handler and, optionally, a file handler.

Examples
--------
.. code-block:: python

    import argparse
    from review_queue.logging.config import add_logging_arguments, setup_logging_from_args

    parser = add_logging_arguments(argparse.ArgumentParser())
    setup_logging_from_args(parser.parse_args(["--log-level", "DEBUG"]))
"""

from __future__ import annotations

import argparse
import logging
import logging.config
import os
from typing import Any, Dict, Final, Optional

from review_queue.settings import SettingModel, get_settings

__all__: list[str] = [
    "DEFAULT_LOG_FORMAT",
    "add_logging_arguments",
    "build_logging_config",
    "setup_logging",
    "setup_logging_from_args",
]

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)8s] %(name)s: %(message)s"

_LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Third party loggers that are too chatty at INFO
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("uvicorn.access", "httpx", "slack_sdk")


def build_logging_config(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    log_format: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a ``logging.config.dictConfig`` dictionary.

    Parameters
    ----------
    level : str
        Level for the ``review_queue`` loggers and the root logger
    log_file : Optional[str]
        File name to additionally log to. Relative names are placed in ``log_dir``.
    log_dir : Optional[str]
        Directory for ``log_file``; created if missing
    log_format : Optional[str]
        Format string for all handlers

    Returns
    -------
    Dict[str, Any]
        The logging configuration
    """
    level = level.upper()
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
            "level": level,
        }
    }

    if log_file:
        if log_dir and not os.path.isabs(log_file):
            os.makedirs(log_dir, exist_ok=True)
            log_file = os.path.join(log_dir, log_file)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
            "encoding": "utf-8",
            "level": level,
        }

    handler_names = list(handlers)
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": log_format or DEFAULT_LOG_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": handler_names, "level": level},
            "review_queue": {"handlers": handler_names, "level": level, "propagate": False},
        },
    }
    for name in _QUIET_LOGGERS:
        config["loggers"][name] = {"level": "WARNING"}
    return config


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Configure logging for the whole process."""
    logging.config.dictConfig(build_logging_config(level, log_file, log_dir, log_format))


def add_logging_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Add the shared ``--log-*`` options to ``parser`` and return it."""
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=_LOG_LEVELS,
        help="Python logging level (default: LOG_LEVEL setting, INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write logs to this file in addition to stdout (default: LOG_FILE setting)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for --log-file when it is a relative path (default: LOG_DIR setting, logs)",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        help="Log message format string (default: LOG_FORMAT setting)",
    )
    return parser


def setup_logging_from_args(args: Any, settings: Optional[SettingModel] = None) -> None:
    """Configure logging from parsed CLI options (namespace or options model).

    Options left unset on the command line fall back to the ``LOG_*`` values
    of ``settings`` (the global settings when None).
    """
    settings = settings or get_settings()
    setup_logging(
        level=getattr(args, "log_level", None) or settings.log_level.value,
        log_file=getattr(args, "log_file", None) or settings.log_file,
        log_dir=getattr(args, "log_dir", None) or settings.log_dir,
        log_format=getattr(args, "log_format", None) or settings.log_format,
    )
