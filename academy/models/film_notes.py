from sqlalchemy import (
    Column,
    Boolean,
    DateTime,
    ForeignKey,
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


class FilmNoteSource(str, enum.Enum):
    personal = "personal"
    assignment = "assignment"


class FilmNote(Base):
    """A film viewing note a student keeps outside of any assignment"""

    __tablename__ = "film_notes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source = Column(Enum(FilmNoteSource), default=FilmNoteSource.personal)
    # {"title", "director", "release_year", "genre", "country", "summary", "favorite_scene"}
    content = Column(JSON, default=dict)
    completed = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class FilmNoteHistory(Base):
    """One numbered note written for a film workbook task"""

    __tablename__ = "film_note_histories"
    __table_args__ = (
        UniqueConstraint(
            "student_task_id", "workbook_item_id", "note_index", name="uq_film_note_history_slot"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_task_id = Column(
        UUID(as_uuid=True), ForeignKey("student_tasks.id", ondelete="CASCADE"), nullable=False
    )
    workbook_item_id = Column(
        UUID(as_uuid=True), ForeignKey("workbook_items.id", ondelete="CASCADE"), nullable=False
    )
    note_index = Column(Integer, nullable=False)
    content = Column(JSON, default=dict)
    completed = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    task = relationship("StudentTask")
