import copy
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from library_api.shared.database.base import Criteria, PersistenceGateway, Record, new_id
from library_api.shared.database.errors import DuplicateRecordError, RecordNotFoundError
from library_api.shared.logger import JohnWickLogger
from library_api.shared.metrics import GatewayMetrics, MetricsCollector


def _matches(record: Record, criteria: Criteria) -> bool:
    return all(record.get(key) == value for key, value in (criteria or {}).items())


class InMemoryGateway(PersistenceGateway):
    """
    Dict-backed gateway for development and tests.
    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(
        self,
        unique_fields: Optional[Dict[str, Iterable[str]]] = None,
        logger: Optional[JohnWickLogger] = None,
    ):
        self.unique_fields = {name: tuple(fields) for name, fields in (unique_fields or {}).items()}
        self.logger = logger or JohnWickLogger(name="InMemoryGateway")
        self.metrics = MetricsCollector(self.logger)
        self._collections: Dict[str, Dict[str, Record]] = {}

    async def start(self) -> None:
        self.logger.info("In-memory store ready")

    async def stop(self) -> None:
        self.metrics.report()

    def _collection(self, name: str) -> Dict[str, Record]:
        return self._collections.setdefault(name, {})

    def _check_unique(self, collection: str, record: Record) -> None:
        for field in self.unique_fields.get(collection, ()):
            value = record.get(field)
            for existing in self._collection(collection).values():
                if existing["id"] != record["id"] and existing.get(field) == value:
                    self.metrics.increment(GatewayMetrics.FAILED_WRITES)
                    raise DuplicateRecordError(collection, field, value)

    async def find_one(self, collection: str, criteria: Dict[str, Any]) -> Optional[Record]:
        self.metrics.increment(GatewayMetrics.READS)
        for record in self._collection(collection).values():
            if _matches(record, criteria):
                return copy.deepcopy(record)
        return None

    async def find(self, collection: str, criteria: Criteria = None) -> List[Record]:
        self.metrics.increment(GatewayMetrics.READS)
        return [copy.deepcopy(r) for r in self._collection(collection).values() if _matches(r, criteria)]

    async def insert(self, collection: str, record: Record) -> Record:
        stored = copy.deepcopy(record)
        stored.setdefault("id", new_id())
        self._check_unique(collection, stored)
        self._collection(collection)[stored["id"]] = stored
        self.metrics.increment(GatewayMetrics.WRITES)
        self.logger.debug("Record inserted", extra={"collection": collection, "id": stored["id"]})
        return copy.deepcopy(stored)

    async def save(self, collection: str, record: Record) -> Record:
        records = self._collection(collection)
        record_id = record.get("id")
        if record_id not in records:
            self.metrics.increment(GatewayMetrics.FAILED_WRITES)
            raise RecordNotFoundError(collection, record_id)
        stored = copy.deepcopy(record)
        self._check_unique(collection, stored)
        records[record_id] = stored
        self.metrics.increment(GatewayMetrics.WRITES)
        return copy.deepcopy(stored)

    async def count(self, collection: str, criteria: Criteria = None) -> int:
        return sum(1 for r in self._collection(collection).values() if _matches(r, criteria))

    async def aggregate_count(self, collection: str, group_key: str) -> Dict[Any, int]:
        return dict(Counter(r.get(group_key) for r in self._collection(collection).values()))

    async def ping(self) -> bool:
        return True
