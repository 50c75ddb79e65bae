from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from schemas.user import UserRead


class LikeResponse(BaseModel):
    like_id: Optional[int] = Field(None, description="ID лайка")
    matched: bool
    match_id: Optional[int] = None
    already_liked: bool = Field(False, description="Лайк уже был поставлен ранее")
    match_user: Optional[UserRead] = None


class MutualLikeResponse(BaseModel):
    user_id: int
    mutual: bool


class IncomingLikeRead(BaseModel):
    user: UserRead
    is_super_like: bool
    liked_at: datetime


class MatchRead(BaseModel):
    id: int
    user1_id: int
    user2_id: int
    matched_at: datetime
    other_user: UserRead
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
