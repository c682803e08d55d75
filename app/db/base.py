from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings


def build_engine(database_url: str = settings.DATABASE_URL) -> Engine:
    if database_url.startswith('sqlite'):
        # In-memory databases must share one connection across the thread pool
        pool_args = {'poolclass': StaticPool} if database_url in ('sqlite://', 'sqlite:///:memory:') else {}
        return create_engine(database_url, connect_args={'check_same_thread': False}, **pool_args)
    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine()
