"""Logging module with structured formatters, PII filtering, and context management."""

from .context import ContextFilter, LogContext, log_context, log_entity_context
from .filters import DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import setup_logging, setup_logging_from_settings

__all__ = [
    "setup_logging",
    "setup_logging_from_settings",
    "log_context",
    "log_entity_context",
    "JSONFormatter",
    "DevFormatter",
    "PIIFilter",
    "DefaultCorrelationFilter",
    "LogContext",
    "ContextFilter",
]
