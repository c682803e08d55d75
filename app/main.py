import logging
import logging.config
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.engine import Engine
from starlette.middleware.cors import CORSMiddleware

from app.api.api_router import router
from app.models import Base
from app.db.base import engine as default_engine
from app.core.config import settings
from app.helpers.exception_handler import CustomException, http_exception_handler, validation_exception_handler
from app.helpers.query_cache import QueryCache
from app.repository.repo_remote_store import SqlRemoteStore

if os.path.exists(settings.LOGGING_CONFIG_FILE):
    logging.config.fileConfig(settings.LOGGING_CONFIG_FILE, disable_existing_loggers=False)

logger = logging.getLogger(__name__)


def get_application(engine: Optional[Engine] = None) -> FastAPI:
    engine = engine or default_engine
    Base.metadata.create_all(bind=engine)

    application = FastAPI(
        title=settings.PROJECT_NAME, docs_url="/docs", redoc_url='/re-docs',
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        description='''
        Medication tracking for caretakers and patients
            - Add, list, update and delete medications per user
            - Bearer token identity
            - Per-user list cache invalidated on every write
        '''
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.state.remote_store = SqlRemoteStore(engine)
    application.state.query_cache = QueryCache(stale_time=settings.QUERY_CACHE_STALE_SECONDS)
    application.include_router(router, prefix=settings.API_PREFIX)
    application.add_exception_handler(CustomException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    for route in application.routes:
        methods = getattr(route, 'methods', None)
        logger.debug(f"Route: {route.path} {methods}")

    return application


app = get_application()
if __name__ == '__main__':
    uvicorn.run(app, host="0.0.0.0", port=8000)
