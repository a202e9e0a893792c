# -*- coding: utf-8 -*-
"""
Log sinks for ldsweep (loguru).

`start_log` replaces loguru's default stderr sink with a file sink and/or a
colourised stderr sink. Sweep progress is logged at INFO, advisory mismatches at
WARNING and instrument traffic at TRACE.
"""

import os
import sys

from loguru import logger

from .defaults import CONFIG_DIR, DEFAULT_LOGLEVEL


def start_log(
    log_to_file=True,
    log_to_stdout=False,
    log_path=None,
    clear_prev=True,
    log_level=DEFAULT_LOGLEVEL,
):
    if log_path is None or log_path == "":
        log_path = log_default_path()
    else:
        log_path = os.path.abspath(log_path)

    if clear_prev:
        clear_log(log_path)

    # first remove (default) stderr output
    logger.remove()

    if log_to_file:
        logger.add(log_path, level=log_level, enqueue=True, colorize=False)
    if log_to_stdout:
        logger.add(sys.stderr, level=log_level, enqueue=True, colorize=True)
    if log_to_file:
        logger.info("Log started at {}", log_path)
    else:
        logger.info("Log started.")


def log_default_path() -> str:
    return str(CONFIG_DIR / "ldsweep.log")


def clear_log(log_path: str):
    """
    Clear the log file at the given path, if it exists.

    Arguments
    ---------
    log_path : str
        The path to the log file. Default path from log_default_path().
    """
    if os.path.exists(log_path):
        try:
            os.remove(log_path)
        except PermissionError:
            logger.error(
                f"Could not clear log file {log_path}. Permission denied. Continuing."
            )


def shutdown_log():
    try:
        logger.info("Closing down log.")
        logger.complete()
        logger.remove()
    except ValueError:
        logger.exception("Error shutting down log - skipping.")
