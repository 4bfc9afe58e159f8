import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from library_api.shared.retry.exponential_backoff_retry import ExponentialBackoffRetry
from library_api.shared.retry.fixed_delay_retry import FixedDelayRetry


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "policy",
    [
        ExponentialBackoffRetry(max_retries=3, base_delay=0, logger=MagicMock()),
        FixedDelayRetry(max_retries=3, delay=0, logger=MagicMock()),
    ],
)
async def test_retries_until_success(policy):
    func = AsyncMock(side_effect=[ConnectionError("down"), ConnectionError("down"), "ok"])

    assert await policy.execute(func) == "ok"
    assert func.await_count == 3


@pytest.mark.asyncio
async def test_reraises_after_exhausting_attempts():
    logger = MagicMock()
    policy = FixedDelayRetry(max_retries=2, delay=0, logger=logger)
    func = AsyncMock(side_effect=ConnectionError("down"))

    with pytest.raises(ConnectionError):
        await policy.execute(func)

    assert func.await_count == 2
    logger.error.assert_called_once()


@pytest.mark.asyncio
async def test_cancellation_is_not_retried():
    policy = ExponentialBackoffRetry(max_retries=5, base_delay=0, logger=MagicMock())
    func = AsyncMock(side_effect=asyncio.CancelledError())

    with pytest.raises(asyncio.CancelledError):
        await policy.execute(func)

    assert func.await_count == 1
