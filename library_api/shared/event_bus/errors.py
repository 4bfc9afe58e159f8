class EventBusError(Exception):
    """Infrastructure failure inside the event bus."""


class SubscriptionCapacityError(EventBusError):
    """Raised when the bus already holds its maximum number of live subscriptions."""

    def __init__(self, limit: int):
        super().__init__(f"Event bus subscription limit reached ({limit})")
        self.limit = limit
