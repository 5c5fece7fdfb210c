from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    Integer,
    Float,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from academy.core.database import Base
from academy.models.lms import JournalSubject


class JournalPeriodStatus(str, enum.Enum):
    draft = "draft"
    in_progress = "in_progress"
    completed = "completed"


class JournalEntryStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"
    published = "published"
    archived = "archived"


class CommentScope(str, enum.Enum):
    homeroom = "homeroom"
    subject = "subject"


class AnnualScheduleCategory(str, enum.Enum):
    annual = "annual"
    film_production = "film_production"


class LearningJournalPeriod(Base):
    __tablename__ = "learning_journal_periods"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    label = Column(String, nullable=True)
    status = Column(Enum(JournalPeriodStatus), default=JournalPeriodStatus.draft)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    locked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    class_ = relationship("Class")
    entries = relationship(
        "LearningJournalEntry", back_populates="period", cascade="all, delete-orphan"
    )
    week_templates = relationship(
        "ClassLearningJournalWeek", back_populates="period", cascade="all, delete-orphan"
    )


class LearningJournalEntry(Base):
    __tablename__ = "learning_journal_entries"
    __table_args__ = (
        UniqueConstraint("period_id", "student_id", name="uq_journal_entry_period_student"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    period_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_journal_periods.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(Enum(JournalEntryStatus), default=JournalEntryStatus.draft)
    completion_rate = Column(Float, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    last_generated_at = Column(DateTime(timezone=True), nullable=True)
    summary = Column(JSON, nullable=True)
    weekly = Column(JSON, nullable=True)
    share_token = Column(String, unique=True, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    period = relationship("LearningJournalPeriod", back_populates="entries")
    student = relationship("Profile")
    comments = relationship(
        "LearningJournalComment", back_populates="entry", cascade="all, delete-orphan"
    )
    logs = relationship(
        "LearningJournalEntryLog",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="LearningJournalEntryLog.created_at",
    )


class LearningJournalEntryLog(Base):
    __tablename__ = "learning_journal_entry_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_journal_entries.id", ondelete="CASCADE"),
        nullable=False,
    )
    previous_status = Column(Enum(JournalEntryStatus), nullable=True)
    next_status = Column(Enum(JournalEntryStatus), nullable=False)
    changed_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entry = relationship("LearningJournalEntry", back_populates="logs")


class LearningJournalComment(Base):
    __tablename__ = "learning_journal_comments"
    __table_args__ = (
        UniqueConstraint(
            "entry_id", "role_scope", "subject", name="uq_journal_comment_scope"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_journal_entries.id", ondelete="CASCADE"),
        nullable=False,
    )
    role_scope = Column(Enum(CommentScope), nullable=False)
    subject = Column(Enum(JournalSubject), nullable=True)
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    entry = relationship("LearningJournalEntry", back_populates="comments")


class ClassLearningJournalWeek(Base):
    __tablename__ = "class_learning_journal_weeks"
    __table_args__ = (
        UniqueConstraint(
            "class_id", "period_id", "week_index", "subject", name="uq_class_journal_week"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    period_id = Column(
        UUID(as_uuid=True),
        ForeignKey("learning_journal_periods.id", ondelete="CASCADE"),
        nullable=False,
    )
    week_index = Column(Integer, nullable=False)  # 1..4
    subject = Column(Enum(JournalSubject), nullable=False)
    material_ids = Column(JSON, default=list)
    material_titles = Column(JSON, default=list)
    material_notes = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    period = relationship("LearningJournalPeriod", back_populates="week_templates")


class LearningJournalGreeting(Base):
    __tablename__ = "learning_journal_greetings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    month_token = Column(String(7), unique=True, nullable=False)  # YYYY-MM
    message = Column(Text, nullable=False)
    principal_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class LearningJournalAcademicEvent(Base):
    __tablename__ = "learning_journal_academic_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    month_token = Column(String(7), nullable=False, index=True)
    title = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    memo = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class LearningJournalAnnualSchedule(Base):
    __tablename__ = "learning_journal_annual_schedules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    period_label = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    tuition_due_date = Column(Date, nullable=True)
    tuition_amount = Column(Integer, nullable=True)
    memo = Column(Text, nullable=True)
    category = Column(Enum(AnnualScheduleCategory), default=AnnualScheduleCategory.annual)
    display_order = Column(Integer, default=0)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
