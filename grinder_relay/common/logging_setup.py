"""
Structured Logging Setup

Consistent logging configuration across the relay services.
Uses JSON format for structured logs in production.
"""

import hashlib
import json
import logging
import os
import sys
from datetime import datetime, timezone


_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))


# Service loggers created so far
_service_names: set[str] = set()


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

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
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
        service_name: Name of the service (e.g., "gateway", "alarms")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"grinder_relay.{service_name}")
    logger.setLevel(numeric_level)

    # Clear existing handlers
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

    # Don't propagate to root logger
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
    log_level = os.environ.get("RELAY_LOG_LEVEL", "INFO")
    json_format = os.environ.get("RELAY_LOG_FORMAT", "json").lower() == "json"

    _service_names.add(service_name)
    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def configure_service_loggers(log_level: str, json_format: bool) -> None:
    """Apply level and format from Settings to every service logger."""
    for service_name in sorted(_service_names):
        setup_logging(service_name, log_level, json_format)


def token_fingerprint(token: str) -> str:
    """Short, non-reversible identifier for a bearer token in logs"""
    if not token:
        return "none"
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]


def log_fault_event(
    logger: logging.LoggerAdapter,
    event_id: str,
    severity: str,
    event_type: str,
    message: str,
) -> None:
    """Log a recorded fault event"""
    log_method = {
        "low": logger.info,
        "info": logger.info,
        "medium": logger.warning,
        "warning": logger.warning,
        "high": logger.error,
        "critical": logger.critical,
    }.get(severity.lower(), logger.warning)

    log_method(
        f"FAULT [{severity.upper()}] {event_type}: {message}",
        extra={
            "event_id": event_id,
            "severity": severity,
            "event_type": event_type,
        },
    )
