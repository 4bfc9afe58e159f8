from library_api.shared.database.base import PersistenceGateway, Record, new_id
from library_api.shared.database.errors import (
    DuplicateRecordError,
    PersistenceError,
    RecordNotFoundError,
    UnknownCollectionError,
)
from library_api.shared.database.memory_gateway import InMemoryGateway
from library_api.shared.database.sqlalchemy_gateway import SqlAlchemyGateway

__all__ = [
    "PersistenceGateway",
    "Record",
    "new_id",
    "PersistenceError",
    "DuplicateRecordError",
    "RecordNotFoundError",
    "UnknownCollectionError",
    "InMemoryGateway",
    "SqlAlchemyGateway",
]
