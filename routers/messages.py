from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.message import MessageCreate, MessageRead
from services import notifications
from services.messaging import list_messages, send_message

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get(
    "/{match_id}",
    response_model=List[MessageRead],
    summary="Переписка в матче, старые сообщения сверху"
)
async def read_messages(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MessageRead]:
    views = await list_messages(db, current_user.id, match_id)
    return [
        MessageRead(
            id=view.message.id,
            match_id=view.message.match_id,
            sender_id=view.message.sender_id,
            message_text=view.message.message_text,
            sent_at=view.message.sent_at,
            sender_name=view.sender_name,
        )
        for view in views
    ]


@router.post(
    "",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Отправить сообщение в матч"
)
async def create_message(
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    sent = await send_message(db, current_user.id, payload.match_id, payload.text)
    message = sent.message

    await notifications.notify_message(db, current_user, sent.recipient_id, message.message_text)

    return MessageRead(
        id=message.id,
        match_id=message.match_id,
        sender_id=message.sender_id,
        message_text=message.message_text,
        sent_at=message.sent_at,
        sender_name=current_user.name,
    )
