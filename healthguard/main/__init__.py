"""
Main module - Main/Composition Root Layer

Loads settings and assembles a ready-to-use ``HealthCheckService``.
"""

from .bootstrap import build_health_check_service, build_probes
from .config import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "build_health_check_service",
    "build_probes",
    "get_settings",
]
