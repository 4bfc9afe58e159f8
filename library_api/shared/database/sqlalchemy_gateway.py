from typing import Any, Dict, List, Optional, Type

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from library_api.config.db_session import get_sessionmaker, init_db
from library_api.shared.database.base import Criteria, PersistenceGateway, Record, new_id
from library_api.shared.database.errors import (
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownCollectionError,
)
from library_api.shared.logger import JohnWickLogger
from library_api.shared.metrics import GatewayMetrics, MetricsCollector


class SqlAlchemyGateway(PersistenceGateway):
    """
    Gateway over SQLAlchemy async sessions.

    Each collection maps to a declarative model whose columns mirror the
    record keys. Unique columns are checked before writing so the caller
    learns which field collided; the database constraint still backs it.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        models: Dict[str, Type[Any]],
        logger: Optional[JohnWickLogger] = None,
        create_tables: bool = True,
    ):
        self.engine = engine
        self.models = models
        self.create_tables = create_tables
        self.logger = logger or JohnWickLogger(name="SqlAlchemyGateway")
        self.metrics = MetricsCollector(self.logger)
        self._sessions = get_sessionmaker(engine)

    # ------------------- Lifecycle ------------------- #
    async def start(self) -> None:
        if self.create_tables:
            await init_db(self.engine)
        else:
            await self.ping()
        self.logger.info("SQL store ready", extra={"collections": list(self.models)})

    async def stop(self) -> None:
        await self.engine.dispose()
        self.metrics.report()
        self.logger.info("SQL engine disposed")

    # ------------------- Helpers ------------------- #
    def _model(self, collection: str) -> Type[Any]:
        try:
            return self.models[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    @staticmethod
    def _to_record(row: Any) -> Record:
        return {column.key: getattr(row, column.key) for column in row.__table__.columns}

    @staticmethod
    def _select(model: Type[Any], criteria: Criteria):
        return select(model).filter_by(**(criteria or {}))

    async def _check_unique(self, session, collection: str, model: Type[Any], record: Record) -> None:
        for column in model.__table__.columns:
            if not column.unique:
                continue
            stmt = select(model).where(column == record.get(column.key), model.id != record["id"])
            if (await session.execute(stmt)).scalars().first() is not None:
                self.metrics.increment(GatewayMetrics.FAILED_WRITES)
                raise DuplicateRecordError(collection, column.key, record.get(column.key))

    # ------------------- Reads ------------------- #
    async def find_one(self, collection: str, criteria: Dict[str, Any]) -> Optional[Record]:
        model = self._model(collection)
        async with self._sessions() as session:
            row = (await session.execute(self._select(model, criteria))).scalars().first()
        self.metrics.increment(GatewayMetrics.READS)
        return self._to_record(row) if row is not None else None

    async def find(self, collection: str, criteria: Criteria = None) -> List[Record]:
        model = self._model(collection)
        async with self._sessions() as session:
            rows = (await session.execute(self._select(model, criteria))).scalars().all()
        self.metrics.increment(GatewayMetrics.READS)
        return [self._to_record(row) for row in rows]

    async def count(self, collection: str, criteria: Criteria = None) -> int:
        model = self._model(collection)
        conditions = [getattr(model, key) == value for key, value in (criteria or {}).items()]
        stmt = select(func.count()).select_from(model).where(*conditions)
        async with self._sessions() as session:
            return (await session.execute(stmt)).scalar_one()

    async def aggregate_count(self, collection: str, group_key: str) -> Dict[Any, int]:
        model = self._model(collection)
        column = getattr(model, group_key)
        stmt = select(column, func.count()).group_by(column)
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return {key: total for key, total in rows}

    # ------------------- Writes ------------------- #
    async def insert(self, collection: str, record: Record) -> Record:
        model = self._model(collection)
        values = dict(record)
        values.setdefault("id", new_id())

        async with self._sessions() as session:
            await self._check_unique(session, collection, model, values)
            row = model(**values)
            session.add(row)
            await self._commit(session, collection)
            stored = self._to_record(row)

        self.metrics.increment(GatewayMetrics.WRITES)
        self.logger.debug("Record inserted", extra={"collection": collection, "id": stored["id"]})
        return stored

    async def save(self, collection: str, record: Record) -> Record:
        model = self._model(collection)
        async with self._sessions() as session:
            row = await session.get(model, record.get("id"))
            if row is None:
                self.metrics.increment(GatewayMetrics.FAILED_WRITES)
                raise RecordNotFoundError(collection, record.get("id"))
            await self._check_unique(session, collection, model, record)
            for key, value in record.items():
                if key != "id":
                    setattr(row, key, value)
            await self._commit(session, collection)
            stored = self._to_record(row)

        self.metrics.increment(GatewayMetrics.WRITES)
        return stored

    async def _commit(self, session, collection: str) -> None:
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            self.metrics.increment(GatewayMetrics.FAILED_WRITES)
            self.logger.warning("Integrity error on write", extra={"collection": collection, "error": str(exc.orig)})
            raise DuplicateRecordError(collection, "unique", str(exc.orig)) from exc

    # ------------------- Health ------------------- #
    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
