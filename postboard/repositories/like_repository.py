import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from postboard.models.like import Like
from postboard.repositories.base_repository import BaseRepository
from postboard.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class LikeRepository(BaseRepository):
    """
    좋아요 데이터 액세스 담당 Repository 클래스
    - (post_id, user_id) 유니크 제약은 DB가 보장
    - 동시에 같은 쌍을 추가하면 한쪽만 성공하고 나머지는 DuplicateEntityError
    """

    async def add(self, post_id: int, user_id: str) -> Like:
        """
        좋아요 추가
        Raises:
            DuplicateEntityError: 이미 좋아요한 경우
            EntityNotFoundError: 게시글이 존재하지 않는 경우
        """
        like = Like(post_id=post_id, user_id=user_id)
        self.session.add(like)
        await self.commit()
        logger.debug(f"좋아요 추가: post_id={post_id}, user_id={user_id}")
        return like

    async def remove(self, post_id: int, user_id: str) -> bool:
        """
        좋아요 삭제 (없으면 아무 일도 하지 않음)
        삭제된 행이 있었는지 여부를 반환
        """
        try:
            result = await self.session.execute(
                delete(Like).where(Like.post_id == post_id, Like.user_id == user_id)
            )
        except SQLAlchemyError as e:
            logger.error(f"좋아요 삭제 실패 (post_id={post_id}, user_id={user_id}): {e}")
            await self.rollback()
            raise RepositoryError(f"좋아요 삭제 중 오류: {e}") from e

        await self.commit()
        removed = result.rowcount > 0
        logger.debug(f"좋아요 삭제: post_id={post_id}, user_id={user_id}, removed={removed}")
        return removed

    async def count_by_post(self, post_id: int) -> int:
        """특정 게시글의 좋아요 수 조회"""
        try:
            result = await self.session.execute(
                select(func.count(Like.id)).where(Like.post_id == post_id)
            )
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"좋아요 수 조회 실패 (post_id={post_id}): {e}")
            raise RepositoryError(f"좋아요 수 조회 중 오류: {e}") from e
