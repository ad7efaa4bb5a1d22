from .health_check import IHealthCheckService, ProbePredicate
from .probe import IClosableProbe, IProbe

__all__ = ["IClosableProbe", "IHealthCheckService", "IProbe", "ProbePredicate"]
