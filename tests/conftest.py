import itertools

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core.database import build_engine, build_sessionmaker, get_db
from core.security import create_access_token
from main import app
from models.base import Base, import_all_models
from models.user import User
from services.gifts import ensure_catalog


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'loveconnect-test.db'}")
    import_all_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_sessionmaker(db_engine)


@pytest.fixture
def make_user(session_factory):
    counter = itertools.count(1)

    async def _make(**fields) -> User:
        n = next(counter)
        data = {"name": f"User{n}", "age": 25, "country": "cz", "bio": "", "distance": n}
        data.update(fields)
        async with session_factory() as session:
            user = User(**data)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest_asyncio.fixture
async def gift_catalog(session_factory):
    async with session_factory() as session:
        await ensure_catalog(session)


@pytest_asyncio.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token, _ = create_access_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
