# utils/seed_db.py
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from core.database import build_sessionmaker, engine
from core.errors import DuplicateLikeError
from models.base import Base, import_all_models
from models.photo import Photo
from models.user import User
from services.gifts import ensure_catalog
from services.matching import MatchEngine

log = logging.getLogger(__name__)

# Демо-анкеты: (name, age, country, bio, verified, premium, distance)
SAMPLE_USERS = [
    ("Tereza", 24, "cz", "Miluji cestování a dobrou kávu ☕", True, False, 5),
    ("Klára", 26, "cz", "Fotografka a milovnice přírody 📸", True, True, 12),
    ("Anička", 23, "cz", "Studentka medicíny 👩‍⚕️", True, False, 8),
    ("Veronika", 27, "cz", "Učitelka na základní škole 👩‍🏫", False, False, 18),
    ("Nikola", 25, "cz", "Grafická designérka 🎨", True, True, 22),
]

PHOTO_URL_TEMPLATE = "https://picsum.photos/seed/loveconnect-{name}/600/800"

# Лайки по индексам SAMPLE_USERS; (0, 1) и (1, 0) образуют матч
SAMPLE_LIKES = [
    (0, 1, False),
    (1, 0, True),
    (2, 0, False),
    (3, 4, True),
]


async def seed(db_engine: AsyncEngine = engine) -> dict:
    import_all_models()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_sessionmaker(db_engine)() as session:
        gifts_added = await ensure_catalog(session)

        existing = await session.execute(select(User.id).limit(1))
        if existing.scalar_one_or_none() is not None:
            log.info("Users already present, skipping sample profiles")
            return {"users": 0, "gifts": gifts_added, "matches": 0}

        users = []
        for name, age, country, bio, verified, premium, distance in SAMPLE_USERS:
            user = User(
                name=name,
                age=age,
                country=country,
                bio=bio,
                verified=verified,
                premium=premium,
                distance=distance,
            )
            session.add(user)
            users.append(user)
        await session.commit()

        for user in users:
            session.add(Photo(
                user_id=user.id,
                photo_url=PHOTO_URL_TEMPLATE.format(name=user.name.lower()),
                is_primary=True,
                order_index=0,
            ))
        await session.commit()

        # Лайки идут через движок, поэтому матчи выводятся так же, как в API
        match_engine = MatchEngine.for_session(session)
        matches = 0
        for liker, liked, is_super in SAMPLE_LIKES:
            try:
                result = await match_engine.record_like(users[liker].id, users[liked].id, is_super)
            except DuplicateLikeError:
                continue
            matches += int(result.match_created)

    log.info("DB seeded: %s users, %s gifts, %s matches", len(users), gifts_added, matches)
    return {"users": len(users), "gifts": gifts_added, "matches": matches}


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
