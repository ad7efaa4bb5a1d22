"""
Use Cases Package - Application Layer

Entry points a transport layer (HTTP endpoint, CLI, scheduler) calls to obtain
health reports.
"""

from .health_use_cases import GetHealthReportUseCase

__all__ = ["GetHealthReportUseCase"]
