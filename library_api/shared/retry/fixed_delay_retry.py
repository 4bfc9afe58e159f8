import asyncio
from typing import Any, Awaitable, Callable, Optional

from library_api.shared.logger import JohnWickLogger
from library_api.shared.retry.base import RetryPolicy


class FixedDelayRetry(RetryPolicy):
    def __init__(self, max_retries: int = 3, delay: float = 1.0, logger: Optional[JohnWickLogger] = None):
        self.max_retries = max_retries
        self.delay = delay
        self.logger = logger or JohnWickLogger(name="FixedDelayRetry")

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        for attempt in range(1, self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if attempt == self.max_retries:
                    self.logger.error(
                        "Fixed delay retries exhausted",
                        extra={
                            "function": getattr(func, "__name__", str(func)),
                            "error": str(exc),
                            "attempts": self.max_retries,
                        },
                    )
                    raise
                self.logger.warning(
                    f"Attempt {attempt} failed, retrying in {self.delay:.2f}s",
                    extra={"error": str(exc)},
                )
                await asyncio.sleep(self.delay)
