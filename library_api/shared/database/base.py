import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]
Criteria = Optional[Dict[str, Any]]


def new_id() -> str:
    return uuid.uuid4().hex


class PersistenceGateway(ABC):
    """
    Abstract base class for document-style stores.
    Records are plain dicts grouped in named collections; every stored
    record carries a string ``id``.
    """

    @abstractmethod
    async def start(self) -> None:
        """Open connections / pools."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Release connections / pools."""
        ...

    @abstractmethod
    async def find_one(self, collection: str, criteria: Dict[str, Any]) -> Optional[Record]:
        """Return the first record whose fields equal ``criteria`` (or None)."""
        ...

    @abstractmethod
    async def find(self, collection: str, criteria: Criteria = None) -> List[Record]:
        """Return every matching record in insertion order."""
        ...

    @abstractmethod
    async def insert(self, collection: str, record: Record) -> Record:
        """Store a new record, assigning an ``id`` when it has none."""
        ...

    @abstractmethod
    async def save(self, collection: str, record: Record) -> Record:
        """Overwrite the stored record with the same ``id``."""
        ...

    @abstractmethod
    async def count(self, collection: str, criteria: Criteria = None) -> int:
        ...

    @abstractmethod
    async def aggregate_count(self, collection: str, group_key: str) -> Dict[Any, int]:
        """Number of records per distinct value of ``group_key``."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...
