import jwt
from typing import Any, Optional, Union
from app.core.config import settings
from datetime import datetime, timedelta, timezone


def create_access_token(user_id: Union[int, Any], email: Optional[str] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS
    )
    to_encode = {
        "exp": expire, "user_id": str(user_id)
    }
    if email:
        to_encode["email"] = email
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.SECURITY_ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.SECURITY_ALGORITHM])
