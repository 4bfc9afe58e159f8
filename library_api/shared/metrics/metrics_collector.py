import threading
from typing import Dict

from library_api.shared.logger import JohnWickLogger


class MetricsCollector:
    """
    Counter store shared by a component and reported through its logger.
    Increments are guarded by a lock so worker threads may record too.
    """
    def __init__(self, logger: JohnWickLogger):
        self.logger = logger
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, amount: int = 1):
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def decrement(self, key: str, amount: int = 1):
        with self._lock:
            self._counters[key] = max(0, self._counters.get(key, 0) - amount)

    def get(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return self._counters.copy()

    def report(self):
        """Emit a structured log line with every counter."""
        counters = self.snapshot()
        if counters:
            self.logger.info("Metrics update", extra=counters)
