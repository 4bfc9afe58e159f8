from library_api.shared.event_bus.base import Event, EventBus, Subscription
from library_api.shared.event_bus.errors import EventBusError, SubscriptionCapacityError
from library_api.shared.event_bus.in_process_eventbus import InProcessEventBus, QueueSubscription

__all__ = [
    "Event",
    "EventBus",
    "Subscription",
    "EventBusError",
    "SubscriptionCapacityError",
    "InProcessEventBus",
    "QueueSubscription",
]
