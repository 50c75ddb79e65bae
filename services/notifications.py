"""
Уведомления внутри приложения. Пишутся роутерами после того, как основное
действие (лайк, матч, сообщение, подарок) уже зафиксировано.
"""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotificationNotFoundError
from models.notification import (
    KIND_GIFT_RECEIVED,
    KIND_LIKE,
    KIND_MATCH,
    KIND_MESSAGE,
    Notification,
)
from models.user import User

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 80


def _preview(text: str) -> str:
    if len(text) <= MESSAGE_PREVIEW_LENGTH:
        return text
    return text[:MESSAGE_PREVIEW_LENGTH - 1] + "…"


async def notify(
    db: AsyncSession,
    user_id: int,
    kind: str,
    title: str,
    body: str = "",
    actor_id: Optional[int] = None,
) -> Notification:
    notification = Notification(user_id=user_id, kind=kind, title=title, body=body, actor_id=actor_id)
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    logger.debug("Notification %s for user %s", kind, user_id)
    return notification


async def notify_like(db: AsyncSession, liker: User, liked_id: int, is_super: bool) -> Notification:
    title = "Someone super liked you ⭐" if is_super else "Someone liked you 💘"
    return await notify(db, liked_id, KIND_LIKE, title, f"{liker.name} likes your profile", actor_id=liker.id)


async def notify_match(db: AsyncSession, user: User, other: User) -> List[Notification]:
    return [
        await notify(db, user.id, KIND_MATCH, "It's a match! 💕", f"You and {other.name} like each other", actor_id=other.id),
        await notify(db, other.id, KIND_MATCH, "It's a match! 💕", f"You and {user.name} like each other", actor_id=user.id),
    ]


async def notify_message(db: AsyncSession, sender: User, recipient_id: int, text: str) -> Notification:
    return await notify(db, recipient_id, KIND_MESSAGE, f"New message from {sender.name}", _preview(text), actor_id=sender.id)


async def notify_gift(db: AsyncSession, sender: User, receiver_id: int, gift_name: str, gift_icon: str) -> Notification:
    return await notify(
        db,
        receiver_id,
        KIND_GIFT_RECEIVED,
        f"{gift_icon} You received a gift!",
        f"{sender.name} sent you {gift_name}",
        actor_id=sender.id,
    )


async def list_notifications(db: AsyncSession, user_id: int, unread_only: bool = False) -> List[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def mark_read(db: AsyncSession, user_id: int, notification_id: int) -> Notification:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotificationNotFoundError(notification_id)

    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification


async def mark_all_read(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount
