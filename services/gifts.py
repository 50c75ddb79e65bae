"""Каталог виртуальных подарков и история отправок. Оплата не моделируется."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from core.errors import GiftNotFoundError, SelfGiftError, UnknownUserError
from models.gift import Gift, GiftTransaction
from models.user import User

logger = logging.getLogger(__name__)

DIRECTION_ALL = "all"
DIRECTION_SENT = "sent"
DIRECTION_RECEIVED = "received"
DIRECTIONS = (DIRECTION_ALL, DIRECTION_SENT, DIRECTION_RECEIVED)

# Каталог по умолчанию: (name, icon, price_czk, price_eur, category)
DEFAULT_GIFTS = [
    ("Růže", "🌹", 10, 0.5, "romantic"),
    ("Čtyřlístek", "🍀", 15, 0.6, "lucky"),
    ("Srdce", "💖", 30, 1.2, "romantic"),
    ("Šampáňo", "🥂", 50, 2.0, "luxury"),
    ("Čokoláda", "🍫", 25, 1.0, "sweet"),
    ("Diamant", "💎", 200, 8.0, "luxury"),
]


@dataclass
class TransactionView:
    transaction: GiftTransaction
    gift: Gift
    sender_name: Optional[str]
    receiver_name: Optional[str]

    @property
    def sent_at(self) -> datetime:
        return self.transaction.sent_at


async def list_gifts(db: AsyncSession, category: Optional[str] = None) -> List[Gift]:
    stmt = select(Gift).order_by(Gift.price_czk, Gift.id)
    if category:
        stmt = stmt.where(Gift.category == category)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def ensure_catalog(db: AsyncSession) -> int:
    """Заполняет каталог, если он пуст. Возвращает число добавленных подарков."""
    existing = await db.execute(select(Gift.id).limit(1))
    if existing.scalar_one_or_none() is not None:
        return 0
    for name, icon, price_czk, price_eur, category in DEFAULT_GIFTS:
        db.add(Gift(name=name, icon=icon, price_czk=price_czk, price_eur=price_eur, category=category))
    await db.commit()
    return len(DEFAULT_GIFTS)


async def send_gift(
    db: AsyncSession,
    sender_id: int,
    receiver_id: int,
    gift_id: int,
    message: Optional[str] = None,
) -> TransactionView:
    if sender_id == receiver_id:
        raise SelfGiftError(sender_id)

    users = await db.execute(select(User).where(User.id.in_([sender_id, receiver_id])))
    users_by_id = {u.id: u for u in users.scalars().all()}
    missing = {sender_id, receiver_id} - set(users_by_id)
    if missing:
        raise UnknownUserError(missing)

    gift = await db.get(Gift, gift_id)
    if not gift:
        raise GiftNotFoundError(gift_id)

    transaction = GiftTransaction(
        sender_id=sender_id,
        receiver_id=receiver_id,
        gift_id=gift.id,
        message=message,
    )
    db.add(transaction)
    await db.commit()
    await db.refresh(transaction)
    logger.info("Gift %s sent from %s to %s", gift.name, sender_id, receiver_id)

    return TransactionView(
        transaction=transaction,
        gift=gift,
        sender_name=users_by_id[sender_id].name,
        receiver_name=users_by_id[receiver_id].name,
    )


async def list_transactions(db: AsyncSession, user_id: int, direction: str = DIRECTION_ALL) -> List[TransactionView]:
    sender = aliased(User)
    receiver = aliased(User)
    stmt = (
        select(GiftTransaction, Gift, sender.name, receiver.name)
        .join(Gift, Gift.id == GiftTransaction.gift_id)
        .join(sender, sender.id == GiftTransaction.sender_id)
        .join(receiver, receiver.id == GiftTransaction.receiver_id)
    )
    if direction == DIRECTION_SENT:
        stmt = stmt.where(GiftTransaction.sender_id == user_id)
    elif direction == DIRECTION_RECEIVED:
        stmt = stmt.where(GiftTransaction.receiver_id == user_id)
    else:
        stmt = stmt.where(
            or_(GiftTransaction.sender_id == user_id, GiftTransaction.receiver_id == user_id)
        )
    stmt = stmt.order_by(GiftTransaction.sent_at.desc(), GiftTransaction.id.desc())

    result = await db.execute(stmt)
    return [
        TransactionView(transaction=tx, gift=gift, sender_name=sender_name, receiver_name=receiver_name)
        for tx, gift, sender_name, receiver_name in result.all()
    ]
