import jwt
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError
from starlette import status

from app.core.security import decode_access_token
from app.helpers.exception_handler import CustomException
from app.schemas.sche_token import TokenPayload, CurrentUser

logger = logging.getLogger(__name__)

reusable_oauth2 = HTTPBearer(
    scheme_name='Authorization',
    auto_error=False,
)


def get_current_user(
    http_authorization_credentials: Optional[HTTPAuthorizationCredentials] = Depends(reusable_oauth2)
) -> Optional[CurrentUser]:
    """
    Resolve the bearer token into the current identity.

    A request without credentials yields None; services decide how to treat
    an anonymous caller. A token that cannot be decoded is rejected outright.
    """
    if http_authorization_credentials is None:
        return None
    try:
        payload = decode_access_token(http_authorization_credentials.credentials)
        token_data = TokenPayload(**payload)
    except (jwt.PyJWTError, ValidationError) as e:
        logger.error(f"Credential validation failed: {e}")
        raise CustomException(
            http_code=status.HTTP_403_FORBIDDEN,
            code='403',
            message="Could not validate credentials"
        )
    if not token_data.user_id:
        raise CustomException(
            http_code=status.HTTP_403_FORBIDDEN,
            code='403',
            message="Could not validate credentials"
        )
    return CurrentUser(id=token_data.user_id, email=token_data.email)
