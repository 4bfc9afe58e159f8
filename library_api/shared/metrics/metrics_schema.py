class EventBusMetrics:
    """Metric keys for InProcessEventBus"""
    PUBLISHED = "published"
    DELIVERED = "delivered"
    DROPPED_NO_SUBSCRIBERS = "dropped_no_subscribers"
    QUEUE_OVERFLOW = "queue_overflow"
    SUBSCRIBED = "subscribed"
    CANCELLED = "cancelled"
    ACTIVE = "active_subscriptions"


class GatewayMetrics:
    """Metric keys for persistence gateways"""
    READS = "reads"
    WRITES = "writes"
    FAILED_WRITES = "failed_writes"


class CatalogMetrics:
    """Metric keys for the catalog service"""
    BOOKS_ADDED = "books_added"
    AUTHORS_CREATED = "authors_created"
    USERS_CREATED = "users_created"
    LOGINS = "logins"
    FAILED_LOGINS = "failed_logins"
