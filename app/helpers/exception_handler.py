import logging
from typing import List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.schemas.sche_base import FieldError, ToastMessage, to_field_errors

logger = logging.getLogger(__name__)


class ExceptionResponseSchema(BaseModel):
    code: str
    message: str
    errors: List[FieldError] = []
    notifications: List[ToastMessage] = []


class CustomException(Exception):
    http_code: int
    code: str
    message: str

    def __init__(self, http_code: int = None, code: str = None, message: str = None):
        self.http_code = http_code if http_code else 500
        self.code = code if code else str(self.http_code)
        self.message = message
        self.notifications: List[ToastMessage] = []
        super().__init__(message)


class UnauthenticatedError(CustomException):
    def __init__(self, message: str = 'User not authenticated'):
        super().__init__(http_code=401, code='401', message=message)


class FormValidationError(CustomException):
    def __init__(self, errors: List[FieldError], message: str = 'Validation failed'):
        super().__init__(http_code=422, code='422', message=message)
        self.errors = errors

    def field_messages(self) -> dict:
        messages = {}
        for error in self.errors:
            messages.setdefault(error.field, error.message)
        return messages


class RemoteQueryError(CustomException):
    def __init__(self, message: str, remote_code: Optional[str] = None):
        super().__init__(http_code=502, code='502', message=message)
        self.remote_code = remote_code


class RemoteWriteError(CustomException):
    def __init__(self, message: str, remote_code: Optional[str] = None, http_code: int = 502):
        super().__init__(http_code=http_code, code=str(http_code), message=message)
        self.remote_code = remote_code


async def http_exception_handler(request: Request, exc: CustomException):
    errors = getattr(exc, 'errors', [])
    notifications = exc.notifications
    return JSONResponse(
        status_code=exc.http_code,
        content=ExceptionResponseSchema(
            code=exc.code, message=exc.message or '', errors=errors, notifications=notifications
        ).model_dump(mode='json')
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = to_field_errors(exc.errors())
    logger.info(f"request validation failed: {request.url.path} errors={len(errors)}")
    return JSONResponse(
        status_code=422,
        content=ExceptionResponseSchema(code='422', message='Validation failed', errors=errors).model_dump(mode='json')
    )
