from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from services.messaging import MAX_MESSAGE_LENGTH


class MessageCreate(BaseModel):
    match_id: int = Field(..., description="ID матча")
    text: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH, description="Текст сообщения")


class MessageRead(BaseModel):
    id: int
    match_id: int
    sender_id: int
    message_text: str
    sent_at: datetime
    sender_name: Optional[str] = None

    class Config:
        from_attributes = True
