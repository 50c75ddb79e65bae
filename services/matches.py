"""Запросы по матчам и входящим лайкам."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from core.errors import MatchNotFoundError, NotMatchParticipantError
from models.like import Like
from models.match import Match
from models.message import Message
from models.user import User


@dataclass
class MatchSummary:
    match: Match
    other_user: User
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None


@dataclass
class IncomingLike:
    user: User
    is_super_like: bool
    liked_at: datetime


async def get_match_for_user(db: AsyncSession, match_id: int, user_id: int) -> Match:
    match = await db.get(Match, match_id)
    if not match:
        raise MatchNotFoundError(match_id)
    if not match.has_participant(user_id):
        raise NotMatchParticipantError(match_id, user_id)
    return match


async def list_matches(db: AsyncSession, user_id: int) -> List[MatchSummary]:
    """Активные матчи пользователя, свежие сверху."""
    result = await db.execute(
        select(Match)
        .where(
            Match.is_active.is_(True),
            or_(Match.user1_id == user_id, Match.user2_id == user_id),
        )
        .order_by(Match.matched_at.desc(), Match.id.desc())
    )
    matches = result.scalars().all()
    if not matches:
        return []

    other_ids = [m.other_user_id(user_id) for m in matches]
    users = await db.execute(select(User).where(User.id.in_(other_ids)))
    users_by_id = {u.id: u for u in users.scalars().all()}

    out: List[MatchSummary] = []
    for match in matches:
        other = users_by_id.get(match.other_user_id(user_id))
        if other is None:
            continue
        last = await db.execute(
            select(Message.message_text, Message.sent_at)
            .where(Message.match_id == match.id)
            .order_by(Message.sent_at.desc(), Message.id.desc())
            .limit(1)
        )
        row = last.first()
        out.append(
            MatchSummary(
                match=match,
                other_user=other,
                last_message=row[0] if row else None,
                last_message_time=row[1] if row else None,
            )
        )
    return out


async def incoming_likes(db: AsyncSession, user_id: int) -> List[IncomingLike]:
    """Кто лайкнул пользователя, но ещё не стал его матчем."""
    back = aliased(Like)
    reciprocal = select(back.id).where(
        back.liker_id == user_id,
        back.liked_id == User.id,
    )
    result = await db.execute(
        select(User, Like.is_super_like, Like.created_at)
        .join(Like, and_(Like.liker_id == User.id, Like.liked_id == user_id))
        .where(~reciprocal.exists())
        .order_by(Like.is_super_like.desc(), Like.created_at.desc(), Like.id.desc())
    )
    return [
        IncomingLike(user=user, is_super_like=is_super, liked_at=liked_at)
        for user, is_super, liked_at in result.all()
    ]
