import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import Column, DateTime, Integer, String, event, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.errors import StorageError, StoreInitError

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Contact(Base):
    __tablename__ = "contacts"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row again.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    firstname = Column(String, nullable=False)
    lastname = Column(String, nullable=False)
    email = Column(String, nullable=False)
    homephone = Column(String, nullable=True)
    mobile = Column(String, nullable=True)
    address = Column(String, nullable=True)
    birthday = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())


@dataclass(frozen=True)
class ExecResult:
    last_insert_id: Optional[int]
    rows_affected: int


def _make_engine(url: str) -> AsyncEngine:
    is_sqlite = url.startswith("sqlite")
    engine = create_async_engine(url, pool_pre_ping=True)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.close()

    return engine


class Store:
    """
    Parameterized statement executor over the contacts database.

    Statements use SQLAlchemy ``:name`` bind parameters and values always
    travel separately in ``params``. Every driver error is re-raised as
    StorageError with the original exception chained.
    """

    def __init__(self, url: str):
        self.url = url
        self._engine = _make_engine(url)

    async def initialize(self):
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            log.error("store_init_failed url=%s err=%s", self._safe_url(), e)
            raise StoreInitError(e) from e
        log.info("store_initialized url=%s", self._safe_url())

    async def reset(self):
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except SQLAlchemyError as e:
            raise StorageError(e) from e

    async def execute(self, statement: str, params: Mapping[str, Any] | None = None) -> ExecResult:
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(text(statement), dict(params or {}))
                return ExecResult(
                    last_insert_id=result.lastrowid,
                    rows_affected=result.rowcount,
                )
        except SQLAlchemyError as e:
            log.error("store_execute_failed err=%s", e)
            raise StorageError(e) from e

    async def query_all(self, statement: str, params: Mapping[str, Any] | None = None) -> list[dict]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(statement), dict(params or {}))
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            log.error("store_query_failed err=%s", e)
            raise StorageError(e) from e

    async def query_one(self, statement: str, params: Mapping[str, Any] | None = None) -> Optional[dict]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(statement), dict(params or {}))
                row = result.mappings().first()
                return dict(row) if row is not None else None
        except SQLAlchemyError as e:
            log.error("store_query_failed err=%s", e)
            raise StorageError(e) from e

    async def dispose(self):
        await self._engine.dispose()
        log.info("store_disposed")

    def _safe_url(self):
        # Drop credentials before logging.
        return self.url.split("@")[-1]
