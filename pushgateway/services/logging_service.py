# -*- coding: utf-8 -*-
"""Location: ./pushgateway/services/logging_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Logging Service.
Configures the standard library logging tree once for the whole process
and hands out named loggers. Text and JSON renderings are supported.

Examples:
    >>> service = LoggingService()
    >>> service.get_logger("pushgateway.test").name
    'pushgateway.test'
"""

# Standard
import logging
import sys
from typing import Optional

# Third-Party
import orjson

# First-Party
from pushgateway.config import settings

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record.

        Args:
            record: the log record.

        Returns:
            The JSON encoded record.

        Examples:
            >>> rec = logging.LogRecord("x", logging.INFO, __file__, 1, "hello %s", ("world",), None)
            >>> '"message":"hello world"' in JSONFormatter().format(rec)
            True
        """
        payload = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload).decode()


class LoggingService:
    """Process-wide logging configuration."""

    _configured: bool = False

    def configure(self, level: Optional[str] = None, log_format: Optional[str] = None, log_file: Optional[str] = None) -> None:
        """Install handlers on the root logger.

        Calling this more than once only updates the level.

        Args:
            level: log level name, defaults to ``settings.log_level``.
            log_format: ``text`` or ``json``, defaults to ``settings.log_format``.
            log_file: optional file to mirror the log stream into.
        """
        root = logging.getLogger()
        root.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))
        if LoggingService._configured:
            return

        fmt = (log_format or settings.log_format).lower()
        formatter: logging.Formatter = JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        target = log_file or settings.log_file
        if target:
            try:
                handlers.append(logging.FileHandler(target, encoding="utf-8"))
            except OSError as e:
                print(f"WARNING: log file {target!r} open failed: {e}, ignoring", file=sys.stderr)

        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)
        LoggingService._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        """Return a named logger.

        Args:
            name: logger name, usually ``__name__``.

        Returns:
            The logger.
        """
        return logging.getLogger(name)
