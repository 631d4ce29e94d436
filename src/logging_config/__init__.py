"""Structured logging for the billing service.

JSON or console output, with the billing run and operator bound to
every line through contextvars.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import BillingContext, generate_run_id, get_context_dict
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "BillingContext",
    "ConsoleFormatter",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "StructuredFormatter",
    "configure_logging",
    "generate_run_id",
    "get_context_dict",
    "get_logger",
]
