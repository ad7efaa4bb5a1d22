from .health_check_service import HealthCheckService
from .isolation import run_isolated

__all__ = ["HealthCheckService", "run_isolated"]
