from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, Text, String
from sqlalchemy.orm import relationship
from postboard.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    게시글(Post) 모델
    - 본문, 이미지 URL, 작성자 식별자를 저장
    - 생성 후에는 수정되지 않으며, 삭제 시 연관 좋아요도 함께 제거
    """
    __tablename__ = "posts"

    id: int = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        index=True,
        doc="게시글 고유 ID"
    )
    content: str = Column(
        Text,
        nullable=False,
        doc="앞뒤 공백이 제거된 게시글 본문"
    )
    image_url: str = Column(
        Text,
        nullable=True,
        doc="첨부 이미지 URL"
    )
    user_id: str = Column(
        String(191),
        nullable=True,
        doc="작성자 식별자 (사용자 테이블과의 참조 무결성 없음)"
    )
    created_at: DateTime = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
        doc="생성 시각(UTC)"
    )
    updated_at: DateTime = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        doc="마지막 변경 시각(UTC)"
    )

    # 좋아요 관계 (One-to-Many)
    likes = relationship(
        "Like",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,  # DB의 ON DELETE CASCADE에 삭제를 위임
        lazy="raise",  # 관계는 읽지 않음 (삭제는 Core delete로 처리)
        doc="연관된 좋아요 목록"
    )
