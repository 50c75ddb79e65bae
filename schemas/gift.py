from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GiftRead(BaseModel):
    id: int
    name: str
    icon: str
    price_czk: int
    price_eur: float
    category: str

    class Config:
        from_attributes = True


class GiftSend(BaseModel):
    receiver_id: int = Field(..., description="Кому отправить подарок")
    gift_id: int = Field(..., description="ID подарка из каталога")
    message: Optional[str] = Field(None, max_length=500, description="Подпись к подарку")


class TransactionRead(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    gift_id: int
    message: Optional[str] = None
    sent_at: datetime
    gift_name: str
    gift_icon: str
    gift_price_czk: int
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None
