from typing import Any, Dict, Iterable, List, Optional, TypeVar, Generic

from pydantic import BaseModel

from app.helpers.enums import FieldErrorCode, NotificationVariant

T = TypeVar("T")

# pydantic error types -> stable field error codes
_ERROR_TYPE_CODES = {
    'too_short': FieldErrorCode.TOO_SHORT,
    'string_too_short': FieldErrorCode.TOO_SHORT,
    'invalid_enum': FieldErrorCode.INVALID_ENUM,
    'enum': FieldErrorCode.INVALID_ENUM,
    'required': FieldErrorCode.REQUIRED,
    'missing': FieldErrorCode.REQUIRED,
}


class FieldError(BaseModel):
    field: str
    code: str
    message: str


def to_field_errors(errors: Iterable[Dict[str, Any]]) -> List[FieldError]:
    """Convert pydantic error dicts into field errors keyed by the innermost location."""
    field_errors = []
    for err in errors:
        loc = err.get('loc') or ()
        # A model-level error on a request body is located at ('body',)
        field = str(loc[-1]) if loc and tuple(loc) != ('body',) else '__root__'
        code = _ERROR_TYPE_CODES.get(err.get('type'), FieldErrorCode.INVALID)
        field_errors.append(FieldError(field=field, code=code.value, message=err.get('msg', '')))
    return field_errors


class ToastMessage(BaseModel):
    title: str
    description: str
    variant: NotificationVariant


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = ''
    data: Optional[T] = None
    notifications: List[ToastMessage] = []

    def success_response(self, data: T, notifications: Optional[List[ToastMessage]] = None):
        self.success = True
        self.message = 'Success'
        self.data = data
        if notifications:
            self.notifications = list(notifications)
            self.message = notifications[-1].description
        return self
