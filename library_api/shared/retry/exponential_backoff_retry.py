import asyncio
from typing import Any, Awaitable, Callable, Optional

from library_api.shared.logger import JohnWickLogger
from library_api.shared.retry.base import RetryPolicy


class ExponentialBackoffRetry(RetryPolicy):
    def __init__(self, max_retries: int = 5, base_delay: float = 0.5, logger: Optional[JohnWickLogger] = None):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.logger = logger or JohnWickLogger(name="ExponentialBackoffRetry")

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        for attempt in range(1, self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if attempt == self.max_retries:
                    self.logger.error(
                        "Exponential backoff retries exhausted",
                        extra={
                            "function": getattr(func, "__name__", str(func)),
                            "error": str(exc),
                            "attempts": self.max_retries,
                        },
                    )
                    raise
                delay = self.base_delay * (2 ** (attempt - 1))
                self.logger.warning(
                    f"Attempt {attempt} failed, retrying after {delay:.2f}s",
                    extra={"error": str(exc)},
                )
                await asyncio.sleep(delay)
