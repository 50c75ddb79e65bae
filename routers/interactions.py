from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import DuplicateLikeError
from core.security import get_current_user
from models.user import User
from schemas.like import IncomingLikeRead, LikeResponse, MatchRead, MutualLikeResponse
from services import notifications
from services.matches import incoming_likes, list_matches
from services.matching import MatchEngine
from services.users import get_user
from utils.user_helpers import to_user_read, to_user_reads

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.post(
    "/like/{user_id}",
    response_model=LikeResponse,
    summary="Поставить лайк и узнать, образовался ли матч",
)
async def like_user(
    user_id: int,
    super_like: bool = Query(False, alias="super", description="Суперлайк"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LikeResponse:
    engine = MatchEngine.for_session(db)
    try:
        result = await engine.record_like(current_user.id, user_id, is_super=super_like)
    except DuplicateLikeError as exc:
        # Повторный лайк безопасен: отвечаем текущим состоянием пары
        return LikeResponse(
            like_id=exc.like_id,
            matched=exc.matched,
            match_id=exc.match_id,
            already_liked=True,
        )

    if not result.matched:
        await notifications.notify_like(db, current_user, user_id, super_like)
        return LikeResponse(like_id=result.like_id, matched=False)

    matched_user = await get_user(db, user_id)
    if result.match_created:
        await notifications.notify_match(db, current_user, matched_user)

    return LikeResponse(
        like_id=result.like_id,
        matched=True,
        match_id=result.match_id,
        match_user=await to_user_read(matched_user, db),
    )


@router.get(
    "/mutual/{user_id}",
    response_model=MutualLikeResponse,
    summary="Проверить, есть ли взаимный лайк",
)
async def mutual_like(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutualLikeResponse:
    mutual = await MatchEngine.for_session(db).check_mutual_like(current_user.id, user_id)
    return MutualLikeResponse(user_id=user_id, mutual=mutual)


@router.get(
    "/likes",
    response_model=List[IncomingLikeRead],
    summary="Список пользователей, которые поставили вам лайк, без матчей",
)
async def list_incoming_likes(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[IncomingLikeRead]:
    likes = await incoming_likes(db, current_user.id)
    reads = await to_user_reads([like.user for like in likes], db)
    return [
        IncomingLikeRead(user=read, is_super_like=like.is_super_like, liked_at=like.liked_at)
        for like, read in zip(likes, reads)
    ]


@router.get(
    "/matches",
    response_model=List[MatchRead],
    summary="Список пользователей, с которыми у вас совпадения",
)
async def get_my_matches(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MatchRead]:
    summaries = await list_matches(db, current_user.id)
    reads = await to_user_reads([s.other_user for s in summaries], db)
    return [
        MatchRead(
            id=s.match.id,
            user1_id=s.match.user1_id,
            user2_id=s.match.user2_id,
            matched_at=s.match.matched_at,
            other_user=read,
            last_message=s.last_message,
            last_message_time=s.last_message_time,
        )
        for s, read in zip(summaries, reads)
    ]
