from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.notification import NotificationRead, ReadAllResponse
from services import notifications as notifications_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=List[NotificationRead],
    summary="Уведомления пользователя, новые сверху"
)
async def read_notifications(
    unread_only: bool = Query(False, description="Только непрочитанные"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await notifications_service.list_notifications(db, current_user.id, unread_only)


@router.post(
    "/read-all",
    response_model=ReadAllResponse,
    summary="Отметить все уведомления прочитанными"
)
async def mark_all_notifications_read(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReadAllResponse:
    updated = await notifications_service.mark_all_read(db, current_user.id)
    return ReadAllResponse(updated=updated)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Отметить уведомление прочитанным"
)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await notifications_service.mark_read(db, current_user.id, notification_id)
