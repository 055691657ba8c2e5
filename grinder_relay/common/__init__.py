"""
Common Utilities

Shared modules used across the relay:
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
"""

from .exceptions import (
    RelayError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ConfigurationError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    configure_service_loggers,
    token_fingerprint,
    log_fault_event,
)

__all__ = [
    # Exceptions
    "RelayError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "PersistenceError",
    "ConfigurationError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "configure_service_loggers",
    "token_fingerprint",
    "log_fault_event",
]
