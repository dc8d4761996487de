import logging
import os
import sys

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "transcribe-api"

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

_handler: logging.Handler | None = None


def _log_level() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handler() -> logging.Handler:
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s",
        static_fields={"service": SERVICE_NAME},
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def setup_logging():
    """
    Configures structured JSON logging for the transcription service.

    Every record is written to stdout as JSON with timestamp, level, logger
    name, message, trace_id, span_id and a fixed "service" field. The level
    comes from LOG_LEVEL (default INFO). Uvicorn's loggers share the handler
    so request logs use the same format.

    Modules call this at import time; the stdout handler is built once and
    reused on later calls.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    global _handler
    if _handler is None:
        _handler = _build_handler()

    level = _log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [_handler]

    for logger_name in _UVICORN_LOGGERS:
        u_logger = logging.getLogger(logger_name)
        u_logger.setLevel(level)
        u_logger.handlers = [_handler]
        u_logger.propagate = False

    return root_logger
