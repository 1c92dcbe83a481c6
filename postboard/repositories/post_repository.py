import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import SQLAlchemyError

from postboard.models.like import Like
from postboard.models.post import Post
from postboard.repositories.base_repository import BaseRepository
from postboard.repositories.exceptions import (
    RepositoryError,
    EntityNotFoundError,
)

logger = logging.getLogger(__name__)


class PostWithLikes(NamedTuple):
    """목록 조회 결과 한 행 (게시글 + 좋아요 집계)"""
    post: Post
    like_count: int
    is_liked: bool


# ==================== 쿼리 빌더 클래스 ====================
class PostQueryBuilder:
    """Post 엔티티 쿼리 빌더"""

    @staticmethod
    def like_count_column():
        """게시글별 좋아요 수 스칼라 서브쿼리"""
        return (
            select(func.count(Like.id))
            .where(Like.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
            .label("like_count")
        )

    @staticmethod
    def build_list_query():
        """좋아요 수만 집계하는 목록 쿼리 (사용자 정보 없음)"""
        return (
            select(Post, PostQueryBuilder.like_count_column())
            .order_by(Post.created_at.desc(), Post.id.desc())
        )

    @staticmethod
    def build_list_query_for_user(user_id: str):
        """좋아요 수 + 해당 사용자의 좋아요 여부까지 계산하는 목록 쿼리"""
        is_liked = (
            exists()
            .where(Like.post_id == Post.id, Like.user_id == user_id)
            .correlate(Post)
            .label("is_liked")
        )
        return (
            select(Post, PostQueryBuilder.like_count_column(), is_liked)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )


# ==================== 메인 Repository 클래스 ====================
class PostRepository(BaseRepository):
    """
    비동기 게시글 데이터 액세스 객체
    - Post 엔티티의 저장, 조회, 삭제 담당
    - SQLAlchemyError는 RepositoryError 계열로 변환하여 상위로 전달
    """

    async def list_with_like_state(self, user_id: Optional[str] = None) -> List[PostWithLikes]:
        """
        전체 게시글을 생성일 내림차순으로 조회
        - user_id가 없으면 좋아요 수만 집계하고 is_liked는 항상 False
        - user_id가 있으면 해당 사용자의 좋아요 여부를 함께 계산
        """
        try:
            if user_id is None:
                result = await self.session.execute(PostQueryBuilder.build_list_query())
                rows = [
                    PostWithLikes(post, int(like_count or 0), False)
                    for post, like_count in result.all()
                ]
            else:
                result = await self.session.execute(
                    PostQueryBuilder.build_list_query_for_user(user_id)
                )
                rows = [
                    PostWithLikes(post, int(like_count or 0), bool(is_liked))
                    for post, like_count, is_liked in result.all()
                ]
            logger.debug(f"게시글 목록 조회: user_id={user_id}, found={len(rows)}")
            return rows
        except SQLAlchemyError as e:
            logger.error(f"게시글 목록 조회 실패: {e}")
            raise RepositoryError(f"게시글 목록 조회 중 오류: {e}") from e

    async def create(
            self,
            content: str,
            image_url: Optional[str] = None,
            user_id: Optional[str] = None,
    ) -> Post:
        """
        새 Post를 저장하고 id/타임스탬프가 채워진 객체를 반환
        """
        post = Post(content=content, image_url=image_url, user_id=user_id)
        try:
            self.session.add(post)
            await self.commit()
            await self.session.refresh(post)
        except SQLAlchemyError as e:
            logger.error(f"Post 저장 실패: {e}")
            await self.rollback()
            raise RepositoryError(f"Post 저장 중 오류: {e}") from e
        logger.debug(f"Post 저장: id={post.id}")
        return post

    async def delete(self, post_id: int) -> None:
        """
        Post와 연관 좋아요를 하나의 트랜잭션에서 삭제
        - 대상이 없으면 EntityNotFoundError
        """
        try:
            await self.session.execute(delete(Like).where(Like.post_id == post_id))
            result = await self.session.execute(delete(Post).where(Post.id == post_id))
        except SQLAlchemyError as e:
            logger.error(f"Post 삭제 실패 (id={post_id}): {e}")
            await self.rollback()
            raise RepositoryError(f"Post 삭제 중 오류: {e}") from e

        if result.rowcount == 0:
            await self.rollback()
            raise EntityNotFoundError(f"Post(id={post_id})가 존재하지 않습니다.")

        await self.commit()
        logger.debug(f"Post 삭제: id={post_id}")

    # ==================== 헬스체크 메서드 ====================
    async def health_check(self) -> Dict[str, Any]:
        """Repository 상태 확인"""
        try:
            # 기본 연결 테스트
            result = await self.session.execute(select(1))
            result.scalar()

            # 게시글 총 개수
            count = await self.session.execute(select(func.count(Post.id)))

            return {
                "status": "healthy",
                "total_posts": count.scalar_one(),
                "connection": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        except Exception as e:
            logger.error(f"헬스체크 실패: {e}")
            return {
                "status": "unhealthy",
                "connection": "error",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
