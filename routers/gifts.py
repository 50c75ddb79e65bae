from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.gift import GiftRead, GiftSend, TransactionRead
from services import gifts as gifts_service
from services import notifications
from services.gifts import TransactionView

router = APIRouter(prefix="/gifts", tags=["gifts"])


def _to_transaction_read(view: TransactionView) -> TransactionRead:
    tx = view.transaction
    return TransactionRead(
        id=tx.id,
        sender_id=tx.sender_id,
        receiver_id=tx.receiver_id,
        gift_id=tx.gift_id,
        message=tx.message,
        sent_at=tx.sent_at,
        gift_name=view.gift.name,
        gift_icon=view.gift.icon,
        gift_price_czk=view.gift.price_czk,
        sender_name=view.sender_name,
        receiver_name=view.receiver_name,
    )


@router.get(
    "",
    response_model=List[GiftRead],
    summary="Каталог подарков"
)
async def read_gifts(
    category: Optional[str] = Query(None, description="romantic, lucky, luxury, sweet"),
    db: AsyncSession = Depends(get_db),
):
    return await gifts_service.list_gifts(db, category)


@router.post(
    "/send",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Отправить подарок пользователю"
)
async def send_gift(
    payload: GiftSend,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TransactionRead:
    view = await gifts_service.send_gift(
        db,
        current_user.id,
        payload.receiver_id,
        payload.gift_id,
        payload.message,
    )
    await notifications.notify_gift(db, current_user, payload.receiver_id, view.gift.name, view.gift.icon)
    return _to_transaction_read(view)


@router.get(
    "/transactions",
    response_model=List[TransactionRead],
    summary="История отправленных и полученных подарков"
)
async def read_transactions(
    direction: str = Query(gifts_service.DIRECTION_ALL, pattern="^(all|sent|received)$"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[TransactionRead]:
    views = await gifts_service.list_transactions(db, current_user.id, direction)
    return [_to_transaction_read(view) for view in views]
