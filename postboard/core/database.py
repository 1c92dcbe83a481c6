import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from postboard.core.config import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """
    SQLite는 연결마다 외래 키 제약을 켜야 ON DELETE CASCADE가 동작함
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_async_engine(url: str, echo: bool = False, **kwargs: Any) -> AsyncEngine:
    """
    DB URL 종류에 맞는 옵션으로 비동기 엔진을 생성
    - MySQL: utf8mb4 설정, 커넥션 재활용
    - SQLite: 외래 키 제약 활성화
    """
    backend = make_url(url).get_backend_name()
    options: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}

    if backend == "mysql":
        options["connect_args"] = {
            "charset": "utf8mb4",
            "init_command": "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci",
        }
        options["pool_recycle"] = 1800
    elif backend == "sqlite":
        options.pop("pool_pre_ping")

    options.update(kwargs)
    engine = create_async_engine(url, **options)

    if backend == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.debug(f"DB 엔진 생성: backend={backend}")
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    요청 단위 세션을 만드는 세션 팩토리 생성
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# 비동기 엔진 및 세션 팩토리 생성
async_engine = build_async_engine(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DB_ECHO)
async_session_factory = build_session_factory(async_engine)

# ORM 베이스
Base = declarative_base()


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """
    애플리케이션 시작 시 호출하여 메타데이터 기반 테이블을 생성
    """
    # 모델 import로 메타데이터 등록
    from postboard.models import post, like  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 종속성: 요청마다 새로운 DB 세션을 생성 후 반환
    """
    async with async_session_factory() as session:
        yield session
