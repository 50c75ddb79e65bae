from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.gift import GiftTransaction
from models.match import Match
from models.message import Message
from models.user import User


@dataclass
class Stats:
    users: int
    matches: int
    messages: int
    gifts: int


async def get_stats(db: AsyncSession) -> Stats:
    async def _count(stmt) -> int:
        result = await db.execute(stmt)
        return result.scalar_one()

    return Stats(
        users=await _count(select(func.count(User.id))),
        matches=await _count(select(func.count(Match.id)).where(Match.is_active.is_(True))),
        messages=await _count(select(func.count(Message.id))),
        gifts=await _count(select(func.count(GiftTransaction.id))),
    )
