import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from library_api.shared.database import PersistenceGateway
from library_api.shared.event_bus import EventBus
from library_api.shared.logger import JohnWickLogger
from library_api.shared.retry.base import RetryPolicy
from library_api.shared.retry.fixed_delay_retry import FixedDelayRetry


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthChecker:
    def __init__(
        self,
        gateway: PersistenceGateway,
        event_bus: EventBus,
        logger: Optional[JohnWickLogger] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        :param gateway: persistence gateway to ping
        :param event_bus: event bus whose topics are reported
        :param logger: JohnWickLogger instance
        :param retry_policy: RetryPolicy instance (default FixedDelayRetry)
        """
        self.gateway = gateway
        self.event_bus = event_bus
        self.logger = logger or JohnWickLogger(name="HealthChecker")
        self.retry_policy: RetryPolicy = retry_policy or FixedDelayRetry(max_retries=3, logger=self.logger)

    async def check_database(self) -> Dict[str, Any]:
        async def _check():
            if not await self.gateway.ping():
                raise ConnectionError("Database did not answer the ping")
            return {"status": "healthy", "checked_at": _now()}

        try:
            return await self.retry_policy.execute(_check)
        except Exception as e:
            self.logger.warning("Database check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "error": str(e), "checked_at": _now()}

    async def check_event_bus(self) -> Dict[str, Any]:
        topics = {topic: self.event_bus.subscriber_count(topic) for topic in self.event_bus.topics()}
        return {"status": "healthy", "topics": topics, "checked_at": _now()}

    async def run_all(self, services: Optional[List[str]] = None) -> Dict[str, Any]:
        """Run every check, or only the named subset."""
        checks = {"database": self.check_database, "event_bus": self.check_event_bus}
        services = services or list(checks)

        self.logger.info("Running health checks", extra={"services": services})
        outcomes = await asyncio.gather(*(checks[name]() for name in services))
        results: Dict[str, Any] = dict(zip(services, outcomes))

        total = len(results)
        healthy = sum(1 for r in results.values() if r["status"] == "healthy")
        results["summary"] = {"total": total, "healthy": healthy, "unhealthy": total - healthy}
        return results
