from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, List, Optional


@dataclass(frozen=True)
class Event:
    topic: str
    value: Any


class Subscription(ABC):
    """Consumer handle bound to a single topic."""

    topic: str

    @abstractmethod
    async def next(self) -> Optional[Event]:
        """Wait for the next event; ``None`` once the subscription is cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Event:
        event = await self.next()
        if event is None:
            raise StopAsyncIteration
        return event


class EventBus(ABC):
    @abstractmethod
    def publish(self, topic: str, value: Any) -> int:
        """Fan ``value`` out to current subscribers; returns how many were reached."""

    @abstractmethod
    def subscribe(self, topic: str) -> Subscription:
        ...

    @abstractmethod
    def cancel(self, subscription: Subscription) -> None:
        ...

    @abstractmethod
    def subscriber_count(self, topic: str) -> int:
        ...

    @abstractmethod
    def topics(self) -> List[str]:
        ...

    async def stream(self, topic: str) -> AsyncIterator[Any]:
        """Yield published values for ``topic`` until the consumer stops iterating."""
        subscription = self.subscribe(topic)
        try:
            async for event in subscription:
                yield event.value
        finally:
            self.cancel(subscription)
