"""
Structured Logging Setup

Consistent logging configuration across all services.
Uses JSON format for structured logs in production.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

LOGGER_PREFIX = "configwatch"

# Attributes present on every LogRecord; anything else came in via `extra`
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Set up structured logging for a service.

    Args:
        service_name: Name of the service (e.g., "config", "display")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"{LOGGER_PREFIX}.{service_name}")
    logger.setLevel(numeric_level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Args:
        service_name: Name of the service

    Returns:
        Logger adapter with service name in all logs
    """
    log_level = os.environ.get("CONFIGWATCH_LOG_LEVEL", "INFO")
    json_format = os.environ.get("CONFIGWATCH_LOG_FORMAT", "json").lower() == "json"

    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def resolve_log_level(level_name: str) -> int | None:
    """Map a level name like "DEBUG" to its numeric value, or None if unknown"""
    value = logging.getLevelName(level_name.strip().upper())
    return value if isinstance(value, int) else None


def set_service_log_level(level_name: str) -> bool:
    """
    Apply a log level to every configwatch logger and its handlers.

    Args:
        level_name: Standard level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        True if the level was applied, False if the name is unknown
    """
    numeric_level = resolve_log_level(level_name)
    if numeric_level is None:
        return False

    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if name != LOGGER_PREFIX and not name.startswith(f"{LOGGER_PREFIX}."):
            continue
        logger.setLevel(numeric_level)
        for handler in logger.handlers:
            handler.setLevel(numeric_level)

    return True


def log_refresh(
    logger: logging.LoggerAdapter,
    config_key: str,
    success: bool,
    detail: Any = None,
    changed: bool = False,
) -> None:
    """Log the outcome of a config refresh"""
    if not success:
        logger.warning(
            f"Config refresh failed for {config_key}: {detail}",
            extra={"config_key": config_key, "error": str(detail)},
        )
    elif changed:
        logger.info(
            f"Config updated: {config_key} -> {detail}",
            extra={"config_key": config_key, "model_name": detail},
        )
    else:
        logger.debug(
            f"Config refreshed (no content changes): {config_key}",
            extra={"config_key": config_key},
        )
