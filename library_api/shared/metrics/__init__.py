from library_api.shared.metrics.metrics_collector import MetricsCollector
from library_api.shared.metrics.metrics_schema import CatalogMetrics, EventBusMetrics, GatewayMetrics

__all__ = ["MetricsCollector", "EventBusMetrics", "GatewayMetrics", "CatalogMetrics"]
