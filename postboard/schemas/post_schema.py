from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    JSON에서는 camelCase, 파이썬 코드에서는 snake_case를 사용하는 기본 모델
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ─── 게시글/좋아요 요청 스키마 정의 ─────────────────────────────────────

class PostCreateRequest(CamelModel):
    """
    게시글 작성 요청 모델
    - content의 공백 검증은 서비스 계층에서 수행 (400 응답)
    """
    content: Optional[str] = Field(
        None, description="게시글 본문 (앞뒤 공백 제거 후 비어 있으면 안 됨)"
    )
    image_url: Optional[str] = Field(
        None, description="첨부 이미지 URL"
    )
    user_id: Optional[str] = Field(
        None, description="작성자 식별자"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "content": "오늘 점심은 라멘",
                "imageUrl": "https://example.com/ramen.jpg",
                "userId": "user-123",
            }
        }
    )


class LikeRequest(CamelModel):
    """
    좋아요 추가/취소 요청 모델
    """
    user_id: Optional[str] = Field(
        None, description="좋아요를 누르는 사용자 식별자 (필수)"
    )


# ─── 응답 스키마 정의 ─────────────────────────────────────────────────

class PostResponse(CamelModel):
    """
    단일 게시글 응답 모델
    """
    id: int
    content: str
    image_url: Optional[str]
    user_id: Optional[str]
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite는 tzinfo를 저장하지 않으므로 naive 값은 UTC로 간주
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class PostListItemResponse(PostResponse):
    """
    목록 조회용 게시글 응답 모델 (좋아요 집계 포함)
    """
    like_count: int = Field(
        0, description="게시글의 좋아요 수"
    )
    is_liked: bool = Field(
        False, description="요청한 userId가 좋아요를 눌렀는지 여부"
    )


class LikeStateResponse(CamelModel):
    """좋아요 추가/취소 후 상태"""
    like_count: int
    is_liked: bool


class MessageResponse(BaseModel):
    message: str
