"""
Shared module - Cross-cutting concerns / Shared Layer

This module provides shared utilities, constants, and enums that are used
across multiple layers of the application.

Its primary responsibilities include:
- Defining cross-layer constants (e.g., environment names, log levels)
- Structured logging configuration
- Synchronisation primitives shared by in-memory components

Following Clean Architecture principles:
- Shared module contains only *cross-cutting concerns*
- It must not depend on Infrastructure or Frameworks
"""

from .consts import EnumEnvironment, EnumLogFormat, EnumLogLevel
from .logging import configure_logging, get_logger, update_logging_from_settings
from .rwlock import ReadWriteLock

__all__ = [
    "EnumEnvironment",
    "EnumLogFormat",
    "EnumLogLevel",
    "ReadWriteLock",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
