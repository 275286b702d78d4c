#!/usr/bin/env python3
"""
roadsim/logging_setup.py
========================
Log routing for a simulation run.

General messages (clock lifecycle, delta changes, profile loads) go to the
console and to ``roadsim.log``.  Per-tick vehicle dumps from the
``roadsim.tick`` logger go only to ``roadsim_tick.log``, which is sized for
their much higher volume.  Calling :func:`setup_logging` again replaces the
handlers installed by the previous call.
"""

import logging
from logging.handlers import RotatingFileHandler

from roadsim import config


def setup_logging(
    level: int = logging.INFO,
    log_file: str = config.LOG_FILE,
    tick_log_file: str = config.TICK_LOG_FILE,
) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_file : str
        Path of the main rotating log file.
    tick_log_file : str
        Path of the per-tick debug log written by the ``roadsim.tick``
        logger.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
    fh.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for per-tick vehicle dumps ───────────────
    tick_logger = logging.getLogger(config.TICK_LOGGER_NAME)
    tick_logger.setLevel(logging.DEBUG)
    tick_logger.propagate = False
    for handler in list(tick_logger.handlers):
        tick_logger.removeHandler(handler)
        handler.close()
    dfh = RotatingFileHandler(
        tick_log_file, maxBytes=5_000_000, backupCount=2
    )
    dfh.setLevel(logging.DEBUG)
    dfh.setFormatter(fmt)
    tick_logger.addHandler(dfh)
