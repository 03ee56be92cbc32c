"""File logging for hosts embedding a layer."""

import logging
import logging.config
import os
import sys
from datetime import datetime
from typing import Any, Dict, Tuple

from phaselayer.constants import LOG_DIR

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Loggers routed to the layer's log file.
_LAYER_LOGGERS = ("phaselayer", "starlette")

_FILE_FORMAT = "%(asctime)s - %(name)25s:%(lineno)-4d - %(levelname)-7s - %(message)s"


def _build_log_cfg(log_fpath: str, level: str) -> Dict[str, Any]:
    """dictConfig schema sending the layer loggers to *log_fpath* at *level*."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "layer_file": {"format": _FILE_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "layer_file": {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "formatter": "layer_file",
                "filename": log_fpath,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            name: {"handlers": ["layer_file"], "propagate": False, "level": level}
            for name in _LAYER_LOGGERS
        },
        "root": {
            "handlers": ["layer_file"],
            "level": level if level == "DEBUG" else "WARNING",
        },
    }


def setup_logging(log_lvl_str: str, *, log_dir: str = LOG_DIR) -> Tuple[str, str]:
    """
    Set up the logging system.

    Uses a timestamped file under *log_dir* and applies the requested level
    to the phaselayer and starlette loggers.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').
        log_dir: Directory receiving the log file.

    Returns:
        A tuple of (log_file_path, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in _VALID_LEVELS:
        print(
            f"Warning: invalid log level '{log_lvl_str}'. Using 'INFO'.",
            file=sys.stderr,
        )
        log_lvl_valid = "INFO"

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(log_dir, exist_ok=True)
    log_fpath = os.path.join(log_dir, f"phaselayer_{ts}_{log_lvl_valid}.log")

    logging.config.dictConfig(_build_log_cfg(log_fpath, log_lvl_valid))
    return log_fpath, log_lvl_valid
