"""
Infrastructure Layer Package

Implementations of the domain ports: the isolation wrapper and aggregator
service, plus the built-in probes backed by psutil and httpx.
"""
