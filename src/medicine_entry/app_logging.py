"""Logging configuration helpers."""

import logging

_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger once and set its level."""
    package_logger = logging.getLogger("medicine_entry")
    package_logger.setLevel(level.upper())
    if any(
        isinstance(handler, logging.StreamHandler)
        for handler in package_logger.handlers
    ):
        return
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(_FORMAT))
    package_logger.addHandler(stream_handler)
    package_logger.propagate = False
