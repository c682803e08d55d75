import os

# Must be set before app modules read their settings
os.environ.setdefault("SQL_DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-medication-tracker-tokens")
os.environ.setdefault("QUERY_CACHE_STALE_SECONDS", "0")

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from app.db.base import build_engine
from app.helpers.query_cache import QueryCache
from app.models import Base
from app.repository.repo_medication import MedicationRepository
from app.repository.repo_remote_store import RemoteStore, RemoteResponse, RemoteError, SqlRemoteStore
from app.schemas.sche_token import CurrentUser
from app.services.srv_medication import MedicationService
from app.services.srv_notification import NotificationService


@dataclass
class Call:
    operation: str
    table: str
    kwargs: Dict[str, Any] = field(default_factory=dict)


class RecordingStore(RemoteStore):
    """Delegates to a real store, records every call and can inject canned responses."""

    def __init__(self, inner: RemoteStore):
        self.inner = inner
        self.calls: List[Call] = []
        self._canned: Dict[str, RemoteResponse] = {}

    def fail_next(self, operation: str, code: str = "500", message: str = "simulated failure"):
        self._canned[operation] = RemoteResponse(error=RemoteError(code=code, message=message))

    def respond_next(self, operation: str, response: RemoteResponse):
        self._canned[operation] = response

    def calls_for(self, operation: str) -> List[Call]:
        return [c for c in self.calls if c.operation == operation]

    async def _dispatch(self, operation, table, **kwargs):
        self.calls.append(Call(operation, table, kwargs))
        canned = self._canned.pop(operation, None)
        if canned is not None:
            return canned
        return await getattr(self.inner, operation)(table, **kwargs)

    async def select(self, table, filters=(), order=None, single=False):
        return await self._dispatch("select", table, filters=list(filters), order=order, single=single)

    async def insert(self, table, rows, single=False):
        return await self._dispatch("insert", table, rows=rows, single=single)

    async def update(self, table, values, filters, single=False):
        return await self._dispatch("update", table, values=values, filters=list(filters), single=single)

    async def delete(self, table, filters):
        return await self._dispatch("delete", table, filters=list(filters))


class SpyQueryCache(QueryCache):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.invalidated: List[tuple] = []

    def invalidate(self, key):
        self.invalidated.append(key)
        super().invalidate(key)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(engine):
    return SqlRemoteStore(engine)


@pytest.fixture
def store(sql_store):
    return RecordingStore(sql_store)


@pytest.fixture
def current_user():
    return CurrentUser(id="test-user-id", email="test@example.com")


@pytest.fixture
def query_cache():
    return SpyQueryCache()


@pytest.fixture
def make_service(store, query_cache):
    def _make(user: Optional[CurrentUser]) -> MedicationService:
        return MedicationService(
            medication_repo=MedicationRepository(store),
            query_cache=query_cache,
            notification_service=NotificationService(),
            current_user=user,
        )
    return _make


@pytest.fixture
def service(make_service, current_user):
    return make_service(current_user)
