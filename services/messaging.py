"""Переписка внутри матча."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import InactiveMatchError
from models.match import Match
from models.message import Message
from models.user import User
from services.matches import get_match_for_user

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


@dataclass
class MessageView:
    message: Message
    sender_name: Optional[str]


@dataclass
class SentMessage:
    message: Message
    recipient_id: int


async def send_message(db: AsyncSession, sender_id: int, match_id: int, text: str) -> SentMessage:
    match: Match = await get_match_for_user(db, match_id, sender_id)
    if not match.is_active:
        raise InactiveMatchError(match_id)

    message = Message(match_id=match.id, sender_id=sender_id, message_text=text)
    db.add(message)
    await db.commit()
    await db.refresh(message)
    logger.debug("Message %s sent in match %s", message.id, match_id)
    return SentMessage(message=message, recipient_id=match.other_user_id(sender_id))


async def list_messages(db: AsyncSession, user_id: int, match_id: int) -> List[MessageView]:
    await get_match_for_user(db, match_id, user_id)
    result = await db.execute(
        select(Message, User.name)
        .join(User, User.id == Message.sender_id)
        .where(Message.match_id == match_id)
        .order_by(Message.sent_at, Message.id)
    )
    return [MessageView(message=message, sender_name=name) for message, name in result.all()]
