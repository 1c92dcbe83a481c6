import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from postboard.core.database import (
    build_async_engine,
    build_session_factory,
    get_db_session,
    init_db,
)
from postboard.main import app


@pytest_asyncio.fixture
async def engine():
    """테스트마다 새로 만드는 인메모리 SQLite 엔진"""
    engine = build_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """get_db_session을 테스트 엔진으로 교체한 HTTP 클라이언트"""
    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
