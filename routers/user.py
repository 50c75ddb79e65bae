from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.params import Path
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import create_access_token, get_current_user
from models.user import User
from schemas.auth import TokenResponse
from schemas.user import PhotoCreate, PhotoRead, UserCreate, UserRead, UserUpdate
from services import users as users_service
from utils.user_helpers import to_user_read, to_user_reads

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать профиль и получить JWT"
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    user = await users_service.create_user(db, **payload.model_dump())
    access_token, expires_ms = create_access_token(user.id)
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in_ms=expires_ms,
        user=await to_user_read(user, db),
    )


@router.get(
    "",
    response_model=List[UserRead],
    summary="Поиск анкет по фильтрам"
)
async def search_users(
    country: Optional[str] = Query(None, description="Код страны"),
    min_age: Optional[int] = Query(None, ge=18),
    max_age: Optional[int] = Query(None, ge=18),
    max_distance: Optional[int] = Query(None, ge=0, description="Максимальное расстояние, км"),
    verified: bool = Query(False, description="Только подтверждённые"),
    premium: bool = Query(False, description="Только премиум"),
    limit: int = Query(users_service.DEFAULT_SEARCH_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    found = await users_service.search_users(
        db,
        exclude_user_id=current_user.id,
        country=country,
        min_age=min_age,
        max_age=max_age,
        max_distance=max_distance,
        verified=verified,
        premium=premium,
        limit=limit,
    )
    return await to_user_reads(found, db)


@router.get(
    "/me",
    response_model=UserRead,
    summary="Получить свой профиль"
)
async def read_my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await to_user_read(current_user, db)


@router.put(
    "/me",
    response_model=UserRead,
    summary="Обновить свой профиль"
)
async def update_my_profile(
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True)
    user = await users_service.update_user(db, current_user, **changes)
    return await to_user_read(user, db)


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить свой аккаунт вместе с лайками, матчами и перепиской"
)
async def delete_my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await users_service.delete_user(db, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/me/photos",
    response_model=PhotoRead,
    status_code=status.HTTP_201_CREATED,
    summary="Добавить фотографию по URL"
)
async def add_my_photo(
    payload: PhotoCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await users_service.add_photo(
        db,
        current_user.id,
        payload.photo_url,
        is_primary=payload.is_primary,
        order_index=payload.order_index,
    )


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Получить публичный профиль другого пользователя по user_id"
)
async def read_user_profile(
    user_id: int = Path(..., description="ID пользователя"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await users_service.get_user(db, user_id)
    return await to_user_read(user, db)


@router.get(
    "/{user_id}/photos",
    response_model=List[PhotoRead],
    summary="Фотографии пользователя по порядку"
)
async def read_user_photos(
    user_id: int = Path(..., description="ID пользователя"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await users_service.get_user(db, user_id)
    return await users_service.list_photos(db, user_id)
