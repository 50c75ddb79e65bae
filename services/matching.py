"""
Движок взаимных лайков.

Инвариант: два пользователя связаны матчем тогда и только тогда, когда
каждый лайкнул другого. Переход в «матч» происходит ровно один раз на пару:
вставка лайка, проверка обратного лайка и вставка матча выполняются в одной
транзакции, а матч вставляется через INSERT ... ON CONFLICT DO NOTHING по
уникальному ключу канонической пары.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncContextManager, AsyncIterator, Optional, Protocol, Sequence, Tuple

from sqlalchemy import and_, func, insert, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import (
    DuplicateLikeError,
    LoveConnectError,
    PersistenceError,
    SelfLikeError,
    UnknownUserError,
)
from models.like import Like
from models.match import Match
from models.user import User

logger = logging.getLogger(__name__)


def canonical_pair(user_a: int, user_b: int) -> Tuple[int, int]:
    """{A, B} и {B, A} всегда дают одну и ту же упорядоченную пару."""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


@dataclass(frozen=True)
class LikeResult:
    like_id: int
    matched: bool
    match_id: Optional[int] = None
    match_created: bool = False


class LikeRepository(Protocol):
    def transaction(self) -> AsyncContextManager[None]: ...

    async def lock_users(self, user_ids: Sequence[int]) -> Sequence[int]: ...

    async def insert_like(self, liker_id: int, liked_id: int, is_super: bool) -> Optional[int]: ...

    async def find_like(self, liker_id: int, liked_id: int) -> Optional[int]: ...

    async def find_reciprocal_like(self, liker_id: int, liked_id: int) -> Optional[int]: ...

    async def find_match(self, user_a: int, user_b: int) -> Optional[int]: ...

    async def insert_match_if_absent(self, user_a: int, user_b: int) -> Tuple[int, bool]: ...

    async def count_likes_between(self, user_a: int, user_b: int) -> int: ...


class SqlAlchemyLikeRepository:
    """Репозиторий лайков и матчей поверх AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        # Сессия может уже находиться в транзакции (autobegin после SELECT
        # в get_current_user), поэтому фиксируем явно, как и везде в роутерах.
        try:
            yield
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def lock_users(self, user_ids: Sequence[int]) -> Sequence[int]:
        # Строки блокируются в порядке возрастания id: два встречных лайка
        # одной пары выстраиваются в очередь и не попадают в deadlock.
        stmt = (
            select(User.id)
            .where(User.id.in_(sorted(set(user_ids))))
            .order_by(User.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]

    def _insert(self, model):
        if self.dialect == "postgresql":
            return postgresql.insert(model)
        if self.dialect == "sqlite":
            return sqlite.insert(model)
        return None

    async def _insert_ignore(self, model, values: dict, conflict_columns: Sequence[str]) -> Optional[int]:
        """INSERT ... ON CONFLICT DO NOTHING RETURNING id. None, если строка уже была."""
        stmt = self._insert(model)
        if stmt is not None:
            stmt = (
                stmt.values(**values)
                .on_conflict_do_nothing(index_elements=list(conflict_columns))
                .returning(model.id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        # Диалект без ON CONFLICT: вставка в SAVEPOINT, конфликт откатывает только её
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    insert(model).values(**values).returning(model.id)
                )
                return result.scalar_one()
        except IntegrityError:
            return None

    async def insert_like(self, liker_id: int, liked_id: int, is_super: bool) -> Optional[int]:
        return await self._insert_ignore(
            Like,
            {"liker_id": liker_id, "liked_id": liked_id, "is_super_like": is_super},
            ("liker_id", "liked_id"),
        )

    async def find_like(self, liker_id: int, liked_id: int) -> Optional[int]:
        result = await self.session.execute(
            select(Like.id).where(Like.liker_id == liker_id, Like.liked_id == liked_id)
        )
        return result.scalar_one_or_none()

    async def find_reciprocal_like(self, liker_id: int, liked_id: int) -> Optional[int]:
        return await self.find_like(liked_id, liker_id)

    async def find_match(self, user_a: int, user_b: int) -> Optional[int]:
        u1, u2 = canonical_pair(user_a, user_b)
        result = await self.session.execute(
            select(Match.id).where(Match.user1_id == u1, Match.user2_id == u2)
        )
        return result.scalar_one_or_none()

    async def insert_match_if_absent(self, user_a: int, user_b: int) -> Tuple[int, bool]:
        """Возвращает (match_id, created)."""
        u1, u2 = canonical_pair(user_a, user_b)
        match_id = await self._insert_ignore(
            Match,
            {"user1_id": u1, "user2_id": u2, "is_active": True},
            ("user1_id", "user2_id"),
        )
        if match_id is not None:
            return match_id, True

        return await self.find_match(u1, u2), False

    async def count_likes_between(self, user_a: int, user_b: int) -> int:
        result = await self.session.execute(
            select(func.count(Like.id)).where(
                or_(
                    and_(Like.liker_id == user_a, Like.liked_id == user_b),
                    and_(Like.liker_id == user_b, Like.liked_id == user_a),
                )
            )
        )
        return result.scalar_one()


class MatchEngine:
    """
    record_like и check_mutual_like. Репозиторий внедряется снаружи, чтобы
    движок можно было гонять и на тестовой SQLite, и на PostgreSQL.
    """

    def __init__(self, repository: LikeRepository):
        self.repository = repository

    @classmethod
    def for_session(cls, session: AsyncSession) -> "MatchEngine":
        return cls(SqlAlchemyLikeRepository(session))

    async def record_like(self, liker_id: int, liked_id: int, is_super: bool = False) -> LikeResult:
        if liker_id == liked_id:
            raise SelfLikeError(liker_id)

        repo = self.repository
        try:
            async with repo.transaction():
                found = await repo.lock_users((liker_id, liked_id))
                missing = {liker_id, liked_id} - set(found)
                if missing:
                    raise UnknownUserError(missing)

                like_id = await repo.insert_like(liker_id, liked_id, is_super)
                if like_id is None:
                    existing_id = await repo.find_like(liker_id, liked_id)
                    mutual = await repo.find_reciprocal_like(liker_id, liked_id) is not None
                    match_id = await repo.find_match(liker_id, liked_id) if mutual else None
                    logger.info("Duplicate like %s -> %s ignored", liker_id, liked_id)
                    raise DuplicateLikeError(
                        liker_id, liked_id, like_id=existing_id, matched=mutual, match_id=match_id
                    )

                if await repo.find_reciprocal_like(liker_id, liked_id) is None:
                    logger.debug("Like %s -> %s recorded (super=%s)", liker_id, liked_id, is_super)
                    return LikeResult(like_id=like_id, matched=False)

                match_id, created = await repo.insert_match_if_absent(liker_id, liked_id)
        except LoveConnectError:
            raise
        except SQLAlchemyError as exc:
            logger.exception("Failed to record like %s -> %s", liker_id, liked_id)
            raise PersistenceError() from exc

        if created:
            logger.info("Match %s created for users %s and %s", match_id, liker_id, liked_id)
        return LikeResult(like_id=like_id, matched=True, match_id=match_id, match_created=created)

    async def check_mutual_like(self, user_a: int, user_b: int) -> bool:
        if user_a == user_b:
            return False
        return await self.repository.count_likes_between(user_a, user_b) == 2
