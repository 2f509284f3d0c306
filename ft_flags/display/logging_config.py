"""Logging configuration setup."""

import copy
import logging
import logging.config
import os
import sys
from datetime import datetime
from typing import Optional, Tuple

from ft_flags.constants import DEFAULT_LOG_LEVEL, LOG_FILE_PREFIX

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_console": {
            "format": "%(levelname)s: %(name)s: %(message)s",
        },
        "simple_file": {
            "format": ("%(asctime)s - %(name)25s:%(lineno)-4d - " "%(levelname)-7s - %(message)s"),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console_handler": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "simple_console",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "ft_flags": {
            "handlers": ["console_handler"],
            "propagate": False,
            "level": DEFAULT_LOG_LEVEL,
        },
    },
    "root": {
        "handlers": ["console_handler"],
        "level": "WARNING",
    },
}


def setup_logging(log_lvl_str: str, log_dir: Optional[str] = None) -> Tuple[Optional[str], str]:
    """
    Set up the logging system.

    Log records always go to stderr.  When *log_dir* is given, they are
    also written to a timestamped file in that directory.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').
        log_dir: Directory for the log file, or ``None`` for stderr only.

    Returns:
        A tuple of (log_file_path or None, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in VALID_LEVELS:
        print(
            f"Warning: invalid log level '{log_lvl_str}'. Using '{DEFAULT_LOG_LEVEL}'.",
            file=sys.stderr,
        )
        log_lvl_valid = DEFAULT_LOG_LEVEL

    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    log_fpath: Optional[str] = None

    if log_dir is not None:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        os.makedirs(log_dir, exist_ok=True)
        log_fpath = os.path.join(log_dir, f"{LOG_FILE_PREFIX}_{ts}_{log_lvl_valid}.log")
        log_cfg["handlers"]["file_handler"] = {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "simple_file",
            "filename": log_fpath,
            "encoding": "utf-8",
        }
        log_cfg["loggers"]["ft_flags"]["handlers"].append("file_handler")
        log_cfg["root"]["handlers"].append("file_handler")

    log_cfg["loggers"]["ft_flags"]["level"] = log_lvl_valid
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    logging.config.dictConfig(log_cfg)
    logging.getLogger(__name__).debug(
        "Logging initialized. Level: %s, log file: %s", log_lvl_valid, log_fpath
    )
    return log_fpath, log_lvl_valid
