"""
Application Layer Package

Orchestrates the domain ports on behalf of the surrounding transport layer.
Serialization of reports is left to that layer.
"""

from healthguard.application import use_cases

__all__ = ["use_cases"]
