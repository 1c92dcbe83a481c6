import logging
import re
from typing import List, Optional

from postboard.repositories.exceptions import (
    RepositoryError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from postboard.repositories.like_repository import LikeRepository
from postboard.repositories.post_repository import PostRepository
from postboard.schemas.post_schema import (
    PostCreateRequest,
    PostResponse,
    PostListItemResponse,
    LikeStateResponse,
    MessageResponse,
)
from postboard.utils.exceptions import (
    BadRequestError,
    ConflictError,
    InternalServerError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?\d+")

# posts.id 컬럼(Integer)이 모든 저장소에서 표현 가능한 범위
POST_ID_MIN = -(2 ** 31)
POST_ID_MAX = 2 ** 31 - 1


def parse_post_id(raw: str) -> int:
    """
    경로 파라미터 문자열을 게시글 ID 정수로 변환
    - 앞뒤 공백은 허용, 그 외 문자가 섞이면 BadRequestError
    """
    value = raw.strip() if isinstance(raw, str) else ""
    if not _INTEGER_RE.fullmatch(value):
        raise BadRequestError("유효하지 않은 ID입니다.")
    return int(value)


def is_storable_post_id(post_id: int) -> bool:
    """
    ID가 저장소 정수 범위 안에 있는지 확인
    - 범위를 벗어난 ID는 어떤 게시글과도 일치할 수 없음
    """
    return POST_ID_MIN <= post_id <= POST_ID_MAX


def _normalize_optional(value: Optional[str]) -> Optional[str]:
    """빈 문자열은 None으로 취급"""
    return value if value else None


def _require_user_id(user_id: Optional[str]) -> str:
    if user_id is None or not user_id.strip():
        raise BadRequestError("userId가 필요합니다.")
    return user_id


class PostService:
    """
    게시글/좋아요 서비스 클래스
    - 입력값 검증은 저장소 호출 전에 수행
    - Repository 예외를 API 예외(400/404/500)로 변환
    """
    def __init__(self, posts: PostRepository, likes: LikeRepository):
        """
        - posts: 게시글 Repository
        - likes: 좋아요 Repository
        (두 Repository는 같은 요청 세션을 공유)
        """
        self.posts = posts
        self.likes = likes

    async def list_posts(self, user_id: Optional[str] = None) -> List[PostListItemResponse]:
        """
        게시글 목록 조회
        - user_id가 주어지면 각 게시글의 isLiked를 계산, 아니면 모두 False
        """
        try:
            rows = await self.posts.list_with_like_state(_normalize_optional(user_id))
        except RepositoryError as e:
            logger.error(f"게시글 목록 조회 실패: {e}")
            raise InternalServerError("게시글 목록을 불러오지 못했습니다.") from e

        return [
            PostListItemResponse.model_validate(row.post).model_copy(
                update={"like_count": row.like_count, "is_liked": row.is_liked}
            )
            for row in rows
        ]

    async def create_post(self, req: PostCreateRequest) -> PostResponse:
        """
        게시글 작성
        1) content 공백 검증
        2) 앞뒤 공백을 제거한 본문으로 저장
        """
        content = req.content.strip() if req.content else ""
        if not content:
            raise BadRequestError("게시글 내용이 비어 있습니다. 내용을 입력해 주세요.")

        try:
            post = await self.posts.create(
                content=content,
                image_url=_normalize_optional(req.image_url),
                user_id=_normalize_optional(req.user_id),
            )
        except RepositoryError as e:
            logger.error(f"게시글 작성 실패: {e}")
            raise InternalServerError("게시글 작성에 실패했습니다.") from e

        logger.info(f"게시글 작성 완료: id={post.id}")
        return PostResponse.model_validate(post)

    async def delete_post(self, raw_id: str) -> MessageResponse:
        """
        게시글 삭제 (연관 좋아요 포함)
        Raises:
            BadRequestError: ID가 정수가 아닌 경우
            NotFoundError: 게시글이 없는 경우
        """
        post_id = parse_post_id(raw_id)
        if not is_storable_post_id(post_id):
            raise NotFoundError("게시글을 찾을 수 없습니다.")

        try:
            await self.posts.delete(post_id)
        except EntityNotFoundError as e:
            raise NotFoundError("게시글을 찾을 수 없습니다.") from e
        except RepositoryError as e:
            logger.error(f"게시글 삭제 실패 (id={post_id}): {e}")
            raise InternalServerError("게시글 삭제에 실패했습니다.") from e

        logger.info(f"게시글 삭제 완료: id={post_id}")
        return MessageResponse(message=f"게시글 {post_id}을(를) 삭제했습니다.")

    async def like_post(self, raw_id: str, user_id: Optional[str]) -> LikeStateResponse:
        """
        좋아요 추가
        - 이미 좋아요한 경우 ConflictError (중복 행은 DB 유니크 제약이 거부)
        - 게시글이 없으면 NotFoundError
        """
        post_id = parse_post_id(raw_id)
        user_id = _require_user_id(user_id)
        if not is_storable_post_id(post_id):
            raise NotFoundError("게시글을 찾을 수 없습니다.")

        try:
            await self.likes.add(post_id, user_id)
        except DuplicateEntityError as e:
            raise ConflictError("이미 좋아요한 게시글입니다.") from e
        except EntityNotFoundError as e:
            raise NotFoundError("게시글을 찾을 수 없습니다.") from e
        except RepositoryError as e:
            logger.error(f"좋아요 추가 실패 (post_id={post_id}): {e}")
            raise InternalServerError("좋아요 처리에 실패했습니다.") from e

        like_count = await self._count_likes(post_id, "좋아요 처리에 실패했습니다.")
        logger.info(f"좋아요 추가: post_id={post_id}, user_id={user_id}, count={like_count}")
        return LikeStateResponse(like_count=like_count, is_liked=True)

    async def unlike_post(self, raw_id: str, user_id: Optional[str]) -> LikeStateResponse:
        """
        좋아요 취소
        - 좋아요 기록이 없어도 에러가 아님 (멱등)
        """
        post_id = parse_post_id(raw_id)
        user_id = _require_user_id(user_id)
        if not is_storable_post_id(post_id):
            # 존재할 수 없는 게시글이므로 좋아요도 없음
            return LikeStateResponse(like_count=0, is_liked=False)

        try:
            await self.likes.remove(post_id, user_id)
        except RepositoryError as e:
            logger.error(f"좋아요 취소 실패 (post_id={post_id}): {e}")
            raise InternalServerError("좋아요 취소에 실패했습니다.") from e

        like_count = await self._count_likes(post_id, "좋아요 취소에 실패했습니다.")
        logger.info(f"좋아요 취소: post_id={post_id}, user_id={user_id}, count={like_count}")
        return LikeStateResponse(like_count=like_count, is_liked=False)

    async def _count_likes(self, post_id: int, failure_message: str) -> int:
        try:
            return await self.likes.count_by_post(post_id)
        except RepositoryError as e:
            logger.error(f"좋아요 수 조회 실패 (post_id={post_id}): {e}")
            raise InternalServerError(failure_message) from e

    async def health_check(self) -> dict:
        """저장소 상태 확인"""
        return await self.posts.health_check()
