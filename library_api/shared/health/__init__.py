from library_api.shared.health.health_check import HealthChecker
from library_api.shared.health.router import build_health_router

__all__ = ["HealthChecker", "build_health_router"]
