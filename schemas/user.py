from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Имя пользователя")
    email: Optional[str] = Field(None, max_length=255, description="E-mail (уникальный)")
    age: int = Field(..., ge=18, le=120, description="Возраст")
    country: str = Field(..., min_length=2, max_length=8, description="Код страны: 'cz', 'sk', 'de'...")
    bio: Optional[str] = Field(None, max_length=2000, description="О себе")
    distance: int = Field(0, ge=0, description="Расстояние, км")

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Имя пользователя")
    email: Optional[str] = Field(None, max_length=255, description="E-mail")
    age: Optional[int] = Field(None, ge=18, le=120, description="Возраст")
    country: Optional[str] = Field(None, min_length=2, max_length=8, description="Код страны")
    bio: Optional[str] = Field(None, max_length=2000, description="О себе")
    distance: Optional[int] = Field(None, ge=0, description="Расстояние, км")

    class Config:
        from_attributes = True


class UserRead(BaseModel):
    id: int = Field(..., description="PK в базе данных")
    name: str
    age: int
    country: str
    bio: Optional[str] = None
    verified: bool = False
    premium: bool = False
    distance: int = 0
    photo_url: Optional[str] = Field(None, description="Главная фотография")
    created_at: datetime

    class Config:
        from_attributes = True


class PhotoCreate(BaseModel):
    photo_url: str = Field(..., min_length=1, max_length=1024, description="URL фотографии")
    is_primary: bool = Field(False, description="Сделать главной")
    order_index: Optional[int] = Field(None, ge=0, description="Позиция в галерее")


class PhotoRead(BaseModel):
    id: int
    user_id: int
    photo_url: str
    is_primary: bool
    order_index: int
    created_at: datetime

    class Config:
        from_attributes = True
