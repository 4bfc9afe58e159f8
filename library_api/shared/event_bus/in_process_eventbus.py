import asyncio
import uuid
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from library_api.shared.event_bus.base import Event, EventBus, Subscription
from library_api.shared.event_bus.errors import EventBusError, SubscriptionCapacityError
from library_api.shared.logger import JohnWickLogger
from library_api.shared.metrics import EventBusMetrics, MetricsCollector


class QueueSubscription(Subscription):
    """
    Subscription backed by a private FIFO of undelivered events.

    ``next()`` parks the consumer on an asyncio.Event that the bus sets
    whenever it appends to the queue or cancels the subscription.
    """

    def __init__(self, bus: "InProcessEventBus", topic: str, max_queue_size: int = 0):
        self.id = uuid.uuid4().hex
        self.topic = topic
        self._bus = bus
        self._max_queue_size = max_queue_size
        self._pending: Deque[Event] = deque()
        self._wakeup = asyncio.Event()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def next(self) -> Optional[Event]:
        while True:
            if self._cancelled:
                return None
            if self._pending:
                return self._pending.popleft()
            self._wakeup.clear()
            await self._wakeup.wait()

    def cancel(self) -> None:
        self._bus.cancel(self)

    def _deliver(self, event: Event) -> bool:
        """Queue ``event``; returns False when the oldest pending event had to go."""
        kept_all = True
        if self._max_queue_size and len(self._pending) >= self._max_queue_size:
            self._pending.popleft()
            kept_all = False
        self._pending.append(event)
        self._wakeup.set()
        return kept_all

    def _close(self) -> None:
        self._cancelled = True
        self._pending.clear()
        self._wakeup.set()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else f"pending={len(self._pending)}"
        return f"<QueueSubscription {self.topic}:{self.id[:8]} {state}>"


class InProcessEventBus(EventBus):
    """
    In-memory fan-out bus: every publish is copied into the queue of each
    subscription registered on the topic at that moment.

    Meant to be driven from a single event loop; publish, subscribe and
    cancel never await, so the loop serializes them.
    """

    def __init__(
        self,
        max_queue_size: int = 1000,
        max_subscriptions: int = 0,
        logger: Optional[JohnWickLogger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.max_queue_size = max_queue_size
        self.max_subscriptions = max_subscriptions
        self.logger = logger or JohnWickLogger(name="InProcessEventBus")
        self.metrics = metrics or MetricsCollector(self.logger)
        self._topics: Dict[str, Dict[str, QueueSubscription]] = {}
        self._live = 0

    def publish(self, topic: str, value: Any) -> int:
        subscriptions = list(self._topics.get(topic, {}).values())
        self.metrics.increment(EventBusMetrics.PUBLISHED)

        if not subscriptions:
            self.metrics.increment(EventBusMetrics.DROPPED_NO_SUBSCRIBERS)
            self.logger.debug("No subscribers for event", extra={"topic": topic})
            return 0

        event = Event(topic=topic, value=value)
        for subscription in subscriptions:
            if not subscription._deliver(event):
                self.metrics.increment(EventBusMetrics.QUEUE_OVERFLOW)
                self.logger.warning(
                    "Subscriber queue full, oldest event discarded",
                    extra={"topic": topic, "subscription": subscription.id, "limit": self.max_queue_size},
                )

        self.metrics.increment(EventBusMetrics.DELIVERED, len(subscriptions))
        self.logger.info("Event published", extra={"topic": topic, "subscribers": len(subscriptions)})
        return len(subscriptions)

    def subscribe(self, topic: str) -> QueueSubscription:
        if self.max_subscriptions and self._live >= self.max_subscriptions:
            self.logger.error(
                "Subscription limit reached",
                extra={"topic": topic, "limit": self.max_subscriptions},
            )
            raise SubscriptionCapacityError(self.max_subscriptions)

        subscription = QueueSubscription(self, topic, self.max_queue_size)
        self._topics.setdefault(topic, {})[subscription.id] = subscription
        self._live += 1

        self.metrics.increment(EventBusMetrics.SUBSCRIBED)
        self.metrics.increment(EventBusMetrics.ACTIVE)
        self.logger.info("Subscriber added", extra={"topic": topic, "subscription": subscription.id})
        return subscription

    def cancel(self, subscription: Subscription) -> None:
        if not isinstance(subscription, QueueSubscription) or subscription._bus is not self:
            raise EventBusError(f"{subscription!r} does not belong to this bus")

        registry = self._topics.get(subscription.topic)
        if registry is None or registry.pop(subscription.id, None) is None:
            # already cancelled
            subscription._close()
            return

        if not registry:
            del self._topics[subscription.topic]
        self._live -= 1
        subscription._close()

        self.metrics.increment(EventBusMetrics.CANCELLED)
        self.metrics.decrement(EventBusMetrics.ACTIVE)
        self.logger.info(
            "Subscriber removed",
            extra={"topic": subscription.topic, "subscription": subscription.id},
        )

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, {}))

    def topics(self) -> List[str]:
        return list(self._topics)

    def close(self) -> None:
        """Cancel every live subscription, ending all consumer streams."""
        for registry in list(self._topics.values()):
            for subscription in list(registry.values()):
                self.cancel(subscription)
        self.metrics.report()
