from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from postboard.core.database import Base
from postboard.models.post import _utcnow


class Like(Base):
    """
    좋아요(Like) 모델
    - 사용자가 특정 게시글(Post)에 좋아요를 표시한 기록 저장
    - (post_id, user_id) 쌍은 DB 유니크 제약으로 한 번만 허용
    """
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_likes_post_user"),
    )

    id: int = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        index=True,
        doc="좋아요 기록 고유 ID"
    )
    post_id: int = Column(
        Integer,
        ForeignKey(
            "posts.id",
            ondelete="CASCADE"  # 게시글 삭제 시 연관 좋아요도 삭제
        ),
        nullable=False,
        index=True,
        doc="좋아요 대상 게시글(Post) ID"
    )
    user_id: str = Column(
        String(191),
        nullable=False,
        doc="좋아요를 누른 사용자 식별자"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        doc="좋아요 시각(UTC)"
    )

    # Post ↔ Like (1:N)
    post = relationship(
        "Post",
        back_populates="likes",
        lazy="raise",  # 관계는 읽지 않음 (삭제는 Core delete로 처리)
        doc="좋아요 대상 Post 객체"
    )
