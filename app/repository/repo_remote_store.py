import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Table, and_, asc, desc, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from app.models import Base

logger = logging.getLogger(__name__)

# Error codes follow the hosted Postgres REST conventions
UNDEFINED_TABLE = '42P01'
UNDEFINED_COLUMN = '42703'
NO_ROWS = 'PGRST116'


@dataclass(frozen=True)
class EqFilter:
    column: str
    value: Any


@dataclass(frozen=True)
class Ordering:
    column: str
    ascending: bool = True


@dataclass
class RemoteError:
    code: str
    message: str
    details: Optional[str] = None


@dataclass
class RemoteResponse:
    """Result-or-error payload of one remote call. Exactly one of data/error is meaningful."""
    data: Any = None
    error: Optional[RemoteError] = None
    count: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RemoteStore(ABC):
    """Table-oriented CRUD endpoint. Implementations report failures in the response, never raise."""

    @abstractmethod
    async def select(self, table: str, filters: Sequence[EqFilter] = (),
                     order: Optional[Ordering] = None, single: bool = False) -> RemoteResponse:
        pass

    @abstractmethod
    async def insert(self, table: str, rows: List[Dict[str, Any]], single: bool = False) -> RemoteResponse:
        pass

    @abstractmethod
    async def update(self, table: str, values: Dict[str, Any], filters: Sequence[EqFilter],
                     single: bool = False) -> RemoteResponse:
        pass

    @abstractmethod
    async def delete(self, table: str, filters: Sequence[EqFilter]) -> RemoteResponse:
        pass


class SqlRemoteStore(RemoteStore):
    """RemoteStore over a SQLAlchemy engine; statements run in the thread pool."""

    def __init__(self, engine: Engine, metadata=Base.metadata):
        self.engine = engine
        self.metadata = metadata

    async def select(self, table, filters=(), order=None, single=False):
        return await run_in_threadpool(self._select, table, filters, order, single)

    async def insert(self, table, rows, single=False):
        return await run_in_threadpool(self._insert, table, rows, single)

    async def update(self, table, values, filters, single=False):
        return await run_in_threadpool(self._update, table, values, filters, single)

    async def delete(self, table, filters):
        return await run_in_threadpool(self._delete, table, filters)

    def _table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise _StoreFailure(UNDEFINED_TABLE, f'relation "{name}" does not exist')
        return table

    @staticmethod
    def _where(table: Table, filters: Sequence[EqFilter]):
        conditions = []
        for f in filters:
            if f.column not in table.c:
                raise _StoreFailure(UNDEFINED_COLUMN, f'column {table.name}.{f.column} does not exist')
            conditions.append(table.c[f.column] == f.value)
        return and_(*conditions) if conditions else None

    @staticmethod
    def _rows(result) -> List[Dict[str, Any]]:
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    def _shape(rows: List[Dict[str, Any]], single: bool) -> RemoteResponse:
        if not single:
            return RemoteResponse(data=rows, count=len(rows))
        if len(rows) != 1:
            return RemoteResponse(error=RemoteError(
                code=NO_ROWS,
                message='JSON object requested, multiple (or no) rows returned',
                details=f'The result contains {len(rows)} rows',
            ))
        return RemoteResponse(data=rows[0], count=1)

    def _run(self, operation: str, table: str, fn) -> RemoteResponse:
        try:
            return fn()
        except _StoreFailure as e:
            logger.warning(f"{operation} {table} rejected: {e.error.message}")
            return RemoteResponse(error=e.error)
        except SQLAlchemyError as e:
            logger.error(f"{operation} {table} failed: {str(e)}", exc_info=True)
            return RemoteResponse(error=RemoteError(code=type(e).__name__, message=str(e.__cause__ or e)))

    def _select(self, name, filters, order, single):
        def run():
            table = self._table(name)
            stmt = select(table)
            where = self._where(table, filters)
            if where is not None:
                stmt = stmt.where(where)
            if order is not None:
                if order.column not in table.c:
                    raise _StoreFailure(UNDEFINED_COLUMN, f'column {name}.{order.column} does not exist')
                direction = asc if order.ascending else desc
                stmt = stmt.order_by(direction(table.c[order.column]))
            with self.engine.connect() as conn:
                rows = self._rows(conn.execute(stmt))
            return self._shape(rows, single)
        return self._run('select', name, run)

    def _insert(self, name, rows, single):
        def run():
            table = self._table(name)
            unknown = {key for row in rows for key in row} - set(table.c.keys())
            if unknown:
                raise _StoreFailure(UNDEFINED_COLUMN, f'column(s) {sorted(unknown)} of {name} do not exist')
            with self.engine.begin() as conn:
                inserted = [self._rows(conn.execute(table.insert().values(**row).returning(*table.c)))[0]
                            for row in rows]
            return self._shape(inserted, single)
        return self._run('insert', name, run)

    def _update(self, name, values, filters, single):
        def run():
            table = self._table(name)
            unknown = set(values) - set(table.c.keys())
            if unknown:
                raise _StoreFailure(UNDEFINED_COLUMN, f'column(s) {sorted(unknown)} of {name} do not exist')
            stmt = table.update().values(**values).returning(*table.c)
            where = self._where(table, filters)
            if where is not None:
                stmt = stmt.where(where)
            with self.engine.connect() as conn:
                rows = self._rows(conn.execute(stmt))
                if single and len(rows) != 1:
                    # A single-row update touching several rows is not applied
                    conn.rollback()
                else:
                    conn.commit()
            return self._shape(rows, single)
        return self._run('update', name, run)

    def _delete(self, name, filters):
        def run():
            table = self._table(name)
            stmt = table.delete().returning(*table.primary_key.columns)
            where = self._where(table, filters)
            if where is not None:
                stmt = stmt.where(where)
            with self.engine.begin() as conn:
                rows = self._rows(conn.execute(stmt))
            return RemoteResponse(data=None, count=len(rows))
        return self._run('delete', name, run)


class _StoreFailure(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.error = RemoteError(code=code, message=message)
