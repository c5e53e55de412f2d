"""Logging for rtfdoc.

Every module logs through a child of the ``rtfdoc`` logger. The library
itself installs only a :class:`logging.NullHandler`; applications such as
the command-line tool decide where records go by calling :func:`configure`.
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

ROOT_LOGGER = "rtfdoc"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return the logger for *name*, placed under the ``rtfdoc`` hierarchy."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure(verbose: bool = False, stream: Optional[TextIO] = None) -> None:
    """Route rtfdoc log records to *stream* (stderr when omitted).

    Warnings are always shown; *verbose* adds debug output.
    """
    logging.basicConfig(format=LOG_FORMAT, stream=stream)
    logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
