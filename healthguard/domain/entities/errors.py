"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
Evaluation never raises; these errors are reserved for configuration time.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ProbeRegistrationError(DomainError):
    """Raised when a probe cannot be registered or deregistered."""

    def __init__(self, message: str, probe_name: Optional[str] = None):
        super().__init__(message, {"probe": probe_name} if probe_name else None)
        self.probe_name = probe_name
