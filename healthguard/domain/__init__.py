"""
Domain Layer Package

This package contains the core of the probe aggregator: the health entities
with their dominance rule, the probe contract and the predicate builders used
to select probes. It has no dependency on third-party clients or on the
configuration layer.
"""

from healthguard.domain import entities, ports, services

__all__ = ["entities", "ports", "services"]
