from pydantic import BaseModel
from typing import Literal

from schemas.user import UserRead


class TokenResponse(BaseModel):
    """
    Ответ при создании профиля: JWT и сам профиль.
    """
    access_token: str
    token_type: Literal["bearer"]
    expires_in_ms: int
    user: UserRead
