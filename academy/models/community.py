from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    Integer,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from academy.core.database import Base


class CulturePickCategory(str, enum.Enum):
    book = "book"
    movie = "movie"
    music = "music"


# ==================== CULTURE PICKS ====================


class CulturePick(Base):
    __tablename__ = "culture_picks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category = Column(Enum(CulturePickCategory), nullable=False)
    title = Column(String(200), nullable=False)
    creator = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    cover_url = Column(String, nullable=True)
    external_link = Column(String, nullable=True)
    period_label = Column(String(50), nullable=False)
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    reviews = relationship(
        "CulturePickReview", back_populates="pick", cascade="all, delete-orphan"
    )


class CulturePickReview(Base):
    __tablename__ = "culture_pick_reviews"
    __table_args__ = (UniqueConstraint("pick_id", "user_id", name="uq_culture_pick_review"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    pick_id = Column(
        UUID(as_uuid=True), ForeignKey("culture_picks.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    pick = relationship("CulturePick", back_populates="reviews")
    likes = relationship(
        "CulturePickReviewLike", back_populates="review", cascade="all, delete-orphan"
    )
    comments = relationship(
        "CulturePickReviewComment", back_populates="review", cascade="all, delete-orphan"
    )


class CulturePickReviewLike(Base):
    __tablename__ = "culture_pick_review_likes"
    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_culture_pick_review_like"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    review_id = Column(
        UUID(as_uuid=True),
        ForeignKey("culture_pick_reviews.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    review = relationship("CulturePickReview", back_populates="likes")


class CulturePickReviewComment(Base):
    __tablename__ = "culture_pick_review_comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    review_id = Column(
        UUID(as_uuid=True),
        ForeignKey("culture_pick_reviews.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id = Column(
        UUID(as_uuid=True),
        ForeignKey("culture_pick_review_comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    review = relationship("CulturePickReview", back_populates="comments")


# ==================== PHOTO DIARY ====================


class PhotoDiaryEntry(Base):
    __tablename__ = "photo_diary_entries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True
    )
    author_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    caption = Column(Text, nullable=True)
    image_paths = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    likes = relationship(
        "PhotoDiaryLike", back_populates="entry", cascade="all, delete-orphan"
    )
    comments = relationship(
        "PhotoDiaryComment",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="PhotoDiaryComment.created_at",
    )


class PhotoDiaryLike(Base):
    __tablename__ = "photo_diary_likes"
    __table_args__ = (UniqueConstraint("entry_id", "user_id", name="uq_photo_diary_like"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_id = Column(
        UUID(as_uuid=True),
        ForeignKey("photo_diary_entries.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entry = relationship("PhotoDiaryEntry", back_populates="likes")


class PhotoDiaryComment(Base):
    __tablename__ = "photo_diary_comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_id = Column(
        UUID(as_uuid=True),
        ForeignKey("photo_diary_entries.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entry = relationship("PhotoDiaryEntry", back_populates="comments")


# ==================== ATELIER ====================


class AtelierPost(Base):
    __tablename__ = "atelier_posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    media_path = Column(String, nullable=True)
    is_hidden = Column(Boolean, default=False)
    is_featured = Column(Boolean, default=False)
    hidden_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    featured_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
