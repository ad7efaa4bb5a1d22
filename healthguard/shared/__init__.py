"""
Shared module - Cross-cutting concerns / Shared Layer

This module provides shared utilities, constants, and enums that are used
across multiple layers of the package.

Its primary responsibilities include:
- Defining cross-layer constants (environment names, log levels, default
  probe budgets)
- Configuring structured logging for every layer

It must not depend on Infrastructure or Main.
"""

from .consts import (
    DEFAULT_OVERALL_TIMEOUT_SECONDS,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    EVALUATION_ENTRY_NAME,
    EnumEnvironment,
    EnumLogLevel,
)
from .logging import (
    configure_logging,
    get_logger,
    log_safely,
    update_logging_from_settings,
)

__all__ = [
    "DEFAULT_OVERALL_TIMEOUT_SECONDS",
    "DEFAULT_PROBE_TIMEOUT_SECONDS",
    "EVALUATION_ENTRY_NAME",
    "EnumEnvironment",
    "EnumLogLevel",
    "configure_logging",
    "get_logger",
    "log_safely",
    "update_logging_from_settings",
]
