"""Core infrastructure: exceptions, logging, batching and audit trail."""

from talentwatch.core.exceptions import (
    AuthExpiredError,
    ConsentDeniedError,
    ConsentExpiredError,
    DeliveryError,
    NotFoundError,
    RegistryUnavailableError,
    StorageCorruptionError,
)
from talentwatch.core.logging import LogContext, get_logger, setup_logging

__all__ = [
    # Exceptions
    "AuthExpiredError",
    "ConsentDeniedError",
    "ConsentExpiredError",
    "DeliveryError",
    "NotFoundError",
    "RegistryUnavailableError",
    "StorageCorruptionError",
    # Logging
    "LogContext",
    "get_logger",
    "setup_logging",
]
