import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from postboard.dependencies import get_post_service
from postboard.schemas.post_schema import (
    PostCreateRequest,
    LikeRequest,
    PostResponse,
    PostListItemResponse,
    LikeStateResponse,
    MessageResponse,
)
from postboard.services.post_service import PostService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/posts", tags=["Post"])


@router.get("", response_model=List[PostListItemResponse], summary="게시글 목록 조회")
async def list_posts(
    user_id: Optional[str] = Query(None, alias="userId", description="좋아요 여부를 계산할 사용자 식별자"),
    svc: PostService = Depends(get_post_service),
) -> List[PostListItemResponse]:
    """
    생성일 내림차순 게시글 목록
    - 각 게시글에 likeCount, isLiked 포함
    - 게시글이 없으면 빈 배열
    """
    return await svc.list_posts(user_id)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="게시글 작성",
)
async def create_post(
    req: PostCreateRequest,
    svc: PostService = Depends(get_post_service),
) -> PostResponse:
    return await svc.create_post(req)


@router.delete("/{post_id}", response_model=MessageResponse, summary="게시글 삭제")
async def delete_post(
    post_id: str,
    svc: PostService = Depends(get_post_service),
) -> MessageResponse:
    """
    게시글 및 연관 좋아요 삭제
    - post_id는 서비스 계층에서 정수 검증 (실패 시 400)
    """
    return await svc.delete_post(post_id)


@router.post(
    "/{post_id}/like",
    response_model=LikeStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="좋아요",
)
async def like_post(
    post_id: str,
    req: Optional[LikeRequest] = None,
    svc: PostService = Depends(get_post_service),
) -> LikeStateResponse:
    return await svc.like_post(post_id, req.user_id if req else None)


@router.delete("/{post_id}/like", response_model=LikeStateResponse, summary="좋아요 취소")
async def unlike_post(
    post_id: str,
    req: Optional[LikeRequest] = None,
    svc: PostService = Depends(get_post_service),
) -> LikeStateResponse:
    """
    좋아요 취소 (좋아요 기록이 없어도 200)
    """
    return await svc.unlike_post(post_id, req.user_id if req else None)
