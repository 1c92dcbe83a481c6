import logging
from abc import ABC

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.repositories.exceptions import (
    RepositoryError,
    DatabaseCommitError,
    DuplicateEntityError,
    EntityNotFoundError,
    classify_integrity_error,
)

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """Repository 베이스 클래스"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        """
        트랜잭션 커밋 (예외 처리 포함)
        - 제약 위반은 종류별 RepositoryError 하위 예외로 변환
        """
        try:
            await self.session.commit()
            logger.debug("DB 커밋 성공")
        except IntegrityError as e:
            logger.warning(f"DB 제약 위반: {e.orig}")
            await self.rollback()
            raise self.translate_integrity_error(e) from e
        except SQLAlchemyError as e:
            logger.error(f"DB 커밋 실패: {e}")
            await self.rollback()
            raise DatabaseCommitError(f"DB 커밋 중 오류 발생: {e}") from e

    async def rollback(self) -> None:
        """트랜잭션 롤백"""
        try:
            await self.session.rollback()
            logger.debug("DB 롤백 완료")
        except SQLAlchemyError as e:
            logger.error(f"DB 롤백 실패: {e}")
            raise RepositoryError(f"DB 롤백 중 오류 발생: {e}") from e

    @staticmethod
    def translate_integrity_error(exc: IntegrityError) -> RepositoryError:
        """IntegrityError를 Repository 예외로 변환"""
        kind = classify_integrity_error(exc)
        if kind == "unique":
            return DuplicateEntityError(f"유니크 제약 위반: {exc.orig}")
        if kind == "foreign_key":
            return EntityNotFoundError(f"참조 대상 없음: {exc.orig}")
        return RepositoryError(f"무결성 제약 위반: {exc.orig}")
