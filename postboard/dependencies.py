from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.core.database import get_db_session
from postboard.repositories.like_repository import LikeRepository
from postboard.repositories.post_repository import PostRepository
from postboard.services.post_service import PostService


def get_post_repository(
    db: AsyncSession = Depends(get_db_session),
) -> PostRepository:
    """
    PostRepository 의존성 주입 함수
    - 요청 단위 세션을 받아 생성
    """
    return PostRepository(db)


def get_like_repository(
    db: AsyncSession = Depends(get_db_session),
) -> LikeRepository:
    """
    LikeRepository 의존성 주입 함수
    """
    return LikeRepository(db)


def get_post_service(
    posts: PostRepository = Depends(get_post_repository),
    likes: LikeRepository = Depends(get_like_repository),
) -> PostService:
    """
    PostService 의존성 주입 함수
    - 두 Repository는 FastAPI 의존성 캐시에 의해 같은 세션을 공유
    """
    return PostService(posts, likes)
