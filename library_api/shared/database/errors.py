from typing import Any


class PersistenceError(Exception):
    """Base error raised by persistence gateways."""


class DuplicateRecordError(PersistenceError):
    def __init__(self, collection: str, field: str, value: Any):
        super().__init__(f"{collection}.{field} must be unique, '{value}' already exists")
        self.collection = collection
        self.field = field
        self.value = value


class RecordNotFoundError(PersistenceError):
    def __init__(self, collection: str, record_id: Any):
        super().__init__(f"No record with id '{record_id}' in {collection}")
        self.collection = collection
        self.record_id = record_id


class UnknownCollectionError(PersistenceError):
    def __init__(self, collection: str):
        super().__init__(f"Unknown collection '{collection}'")
        self.collection = collection
