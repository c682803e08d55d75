from typing import Optional
from pydantic import BaseModel


class TokenPayload(BaseModel):
    user_id: Optional[str] = None
    email: Optional[str] = None


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
