"""Утилиты для преобразования моделей пользователей в схемы Pydantic."""
from collections.abc import Iterable
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.user import UserRead
from services.users import primary_photo_urls


def build_user_read(user: User, photo_url: Optional[str] = None) -> UserRead:
    return UserRead(
        id=user.id,
        name=user.name,
        age=user.age,
        country=user.country,
        bio=user.bio,
        verified=user.verified,
        premium=user.premium,
        distance=user.distance,
        photo_url=photo_url,
        created_at=user.created_at,
    )


async def to_user_read(user: User, db: AsyncSession) -> UserRead:
    """Сконвертировать модель пользователя в UserRead с главным фото."""
    photos = await primary_photo_urls(db, [user.id])
    return build_user_read(user, photos.get(user.id))


async def to_user_reads(users: Iterable[User], db: AsyncSession) -> List[UserRead]:
    """Сконвертировать список моделей пользователей в UserRead одним запросом за фото."""
    users = list(users)
    photos = await primary_photo_urls(db, [user.id for user in users])
    return [build_user_read(user, photos.get(user.id)) for user in users]
