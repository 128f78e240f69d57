# formstate/runtime/log_config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class FormStateLogHandler(logging.StreamHandler):
    """Stream handler installed on the package logger by ``configure_logging``."""

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        super().__init__(stream or sys.stderr)
        self.setFormatter(logging.Formatter(LOG_FORMAT))


def configure_logging(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Attach a single stream handler to the ``formstate`` logger.

    Calling this again replaces the handler it installed before instead of
    adding another one. Handlers added by the application are left alone.

    :param level: Level for the package logger.
    :param stream: Destination stream, stderr when omitted.
    :return: The configured package logger.
    """
    package_logger = logging.getLogger("formstate")
    for handler in list(package_logger.handlers):
        if isinstance(handler, FormStateLogHandler):
            package_logger.removeHandler(handler)

    package_logger.addHandler(FormStateLogHandler(stream))
    package_logger.setLevel(level)
    return package_logger
