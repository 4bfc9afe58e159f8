from unittest.mock import AsyncMock, MagicMock

import pytest

from library_api.shared.event_bus import InProcessEventBus
from library_api.shared.health import HealthChecker
from library_api.shared.retry.fixed_delay_retry import FixedDelayRetry


def make_checker(ping):
    gateway = MagicMock()
    gateway.ping = ping
    bus = InProcessEventBus(logger=MagicMock())
    checker = HealthChecker(
        gateway,
        bus,
        logger=MagicMock(),
        retry_policy=FixedDelayRetry(max_retries=2, delay=0, logger=MagicMock()),
    )
    return checker, bus


@pytest.mark.asyncio
async def test_run_all_reports_healthy_services():
    checker, bus = make_checker(AsyncMock(return_value=True))
    bus.subscribe("BOOK_ADDED")

    results = await checker.run_all()

    assert results["database"]["status"] == "healthy"
    assert results["event_bus"]["topics"] == {"BOOK_ADDED": 1}
    assert results["summary"] == {"total": 2, "healthy": 2, "unhealthy": 0}


@pytest.mark.asyncio
async def test_database_failure_is_reported_unhealthy():
    ping = AsyncMock(side_effect=ConnectionError("connection refused"))
    checker, _ = make_checker(ping)

    result = await checker.check_database()

    assert result["status"] == "unhealthy"
    assert "connection refused" in result["error"]
    assert ping.await_count == 2


@pytest.mark.asyncio
async def test_ping_returning_false_is_unhealthy():
    checker, _ = make_checker(AsyncMock(return_value=False))

    results = await checker.run_all(["database"])

    assert results["database"]["status"] == "unhealthy"
    assert results["summary"]["unhealthy"] == 1
