"""Профили и фотографии пользователей."""
import logging
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import EmailTakenError, UnknownUserError
from models.photo import Photo
from models.user import User

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20

PROFILE_FIELDS = ("name", "email", "age", "country", "bio", "verified", "premium", "distance")
NULLABLE_FIELDS = ("email", "bio")


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise UnknownUserError([user_id])
    return user


async def create_user(db: AsyncSession, **fields) -> User:
    fields["email"] = _normalize_email(fields.get("email"))
    if fields.get("country"):
        fields["country"] = fields["country"].strip().lower()
    if fields["email"]:
        exists = await db.execute(select(User.id).where(User.email == fields["email"]))
        if exists.scalar_one_or_none():
            raise EmailTakenError(fields["email"])

    user = User(**{key: value for key, value in fields.items() if key in PROFILE_FIELDS and value is not None})
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise EmailTakenError(fields["email"])
    await db.refresh(user)
    logger.info("User %s created", user.id)
    return user


async def update_user(db: AsyncSession, user: User, **changes) -> User:
    # null для обязательных полей означает «не менять»
    changes = {
        key: value
        for key, value in changes.items()
        if key in PROFILE_FIELDS and (value is not None or key in NULLABLE_FIELDS)
    }

    if "email" in changes:
        changes["email"] = _normalize_email(changes["email"])
        if changes["email"] and changes["email"] != user.email:
            exists = await db.execute(select(User.id).where(User.email == changes["email"]))
            if exists.scalar_one_or_none():
                raise EmailTakenError(changes["email"])

    if changes.get("country"):
        changes["country"] = changes["country"].strip().lower()

    for key, value in changes.items():
        setattr(user, key, value)

    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise EmailTakenError(changes.get("email"))
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    # Лайки, матчи, сообщения, подарки и уведомления удаляются каскадом в БД
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info("User %s deleted", user_id)


async def list_users(db: AsyncSession, country: Optional[str] = None) -> List[User]:
    stmt = select(User).order_by(User.id)
    if country:
        stmt = stmt.where(User.country == country.lower())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def search_users(
    db: AsyncSession,
    *,
    exclude_user_id: Optional[int] = None,
    country: Optional[str] = None,
    min_age: Optional[int] = None,
    max_age: Optional[int] = None,
    max_distance: Optional[int] = None,
    verified: bool = False,
    premium: bool = False,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> List[User]:
    stmt = select(User)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    if country:
        stmt = stmt.where(User.country == country.lower())
    if min_age is not None:
        stmt = stmt.where(User.age >= min_age)
    if max_age is not None:
        stmt = stmt.where(User.age <= max_age)
    if max_distance is not None:
        stmt = stmt.where(User.distance <= max_distance)
    if verified:
        stmt = stmt.where(User.verified.is_(True))
    if premium:
        stmt = stmt.where(User.premium.is_(True))

    stmt = stmt.order_by(User.distance, User.id).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_photos(db: AsyncSession, user_id: int) -> List[Photo]:
    result = await db.execute(
        select(Photo)
        .where(Photo.user_id == user_id)
        .order_by(Photo.order_index, Photo.id)
    )
    return list(result.scalars().all())


async def add_photo(
    db: AsyncSession,
    user_id: int,
    photo_url: str,
    is_primary: bool = False,
    order_index: Optional[int] = None,
) -> Photo:
    existing = await list_photos(db, user_id)
    if order_index is None:
        order_index = len(existing)
    # Первая фотография всегда главная
    if not existing:
        is_primary = True

    if is_primary:
        await db.execute(
            update(Photo)
            .where(Photo.user_id == user_id, Photo.is_primary.is_(True))
            .values(is_primary=False)
        )

    photo = Photo(user_id=user_id, photo_url=photo_url, is_primary=is_primary, order_index=order_index)
    db.add(photo)
    await db.commit()
    await db.refresh(photo)
    return photo


async def primary_photo_urls(db: AsyncSession, user_ids: List[int]) -> dict:
    """user_id -> URL главной фотографии."""
    if not user_ids:
        return {}
    result = await db.execute(
        select(Photo.user_id, Photo.photo_url)
        .where(Photo.user_id.in_(user_ids), Photo.is_primary.is_(True))
    )
    return {user_id: url for user_id, url in result.all()}
