from fastapi import APIRouter

from library_api.shared.health.health_check import HealthChecker


def build_health_router(health_checker: HealthChecker) -> APIRouter:
    health_router = APIRouter(prefix="/health", tags=["health"])

    @health_router.get("/", summary="Check all services")
    async def check_all_services():
        return await health_checker.run_all()

    @health_router.get("/database", summary="Check the database")
    async def check_database():
        return {"database": await health_checker.check_database()}

    @health_router.get("/event-bus", summary="Check the event bus")
    async def check_event_bus():
        return {"event_bus": await health_checker.check_event_bus()}

    return health_router
