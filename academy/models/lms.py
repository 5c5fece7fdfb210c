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


class JournalSubject(str, enum.Enum):
    directing = "directing"
    screenwriting = "screenwriting"
    film_research = "film_research"
    integrated_theory = "integrated_theory"
    karts = "karts"


class WorkbookType(str, enum.Enum):
    srs = "srs"
    pdf = "pdf"
    writing = "writing"
    film = "film"
    lecture = "lecture"
    image = "image"


class AnswerType(str, enum.Enum):
    multiple_choice = "multiple_choice"
    short_answer = "short_answer"
    text = "text"
    file = "file"


class TargetScope(str, enum.Enum):
    class_ = "class"
    student = "student"
    mixed = "mixed"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"
    canceled = "canceled"


class EvaluationScore(str, enum.Enum):
    pass_ = "pass"
    nonpass = "nonpass"


class Workbook(Base):
    __tablename__ = "workbooks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String, nullable=False)
    subject = Column(Enum(JournalSubject), nullable=False)
    type = Column(Enum(WorkbookType), nullable=False)
    week_label = Column(String, nullable=True)
    tags = Column(JSON, default=list)
    summary = Column(Text, nullable=True)
    config = Column(JSON, default=dict)  # type specific settings (srs mode, film note count...)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "WorkbookItem",
        back_populates="workbook",
        cascade="all, delete-orphan",
        order_by="WorkbookItem.position",
    )
    assignments = relationship("Assignment", back_populates="workbook")


class WorkbookItem(Base):
    __tablename__ = "workbook_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workbook_id = Column(
        UUID(as_uuid=True), ForeignKey("workbooks.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=1)
    prompt = Column(Text, nullable=False)
    explanation = Column(Text, nullable=True)
    answer_type = Column(Enum(AnswerType), default=AnswerType.text)
    # [{"label": "...", "is_correct": bool}]
    choices = Column(JSON, default=list)
    # [{"label": "...", "answer": "..."}]
    short_fields = Column(JSON, default=list)
    grading_criteria = Column(JSON, nullable=True)

    workbook = relationship("Workbook", back_populates="items")


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workbook_id = Column(
        UUID(as_uuid=True), ForeignKey("workbooks.id", ondelete="CASCADE"), nullable=False
    )
    assigned_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    due_at = Column(DateTime(timezone=True), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    target_scope = Column(Enum(TargetScope, values_callable=lambda e: [m.value for m in e]))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    workbook = relationship("Workbook", back_populates="assignments")
    targets = relationship(
        "AssignmentTarget", back_populates="assignment", cascade="all, delete-orphan"
    )
    tasks = relationship(
        "StudentTask", back_populates="assignment", cascade="all, delete-orphan"
    )


class AssignmentTarget(Base):
    __tablename__ = "assignment_targets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    assignment_id = Column(
        UUID(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False
    )
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True
    )
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True
    )

    assignment = relationship("Assignment", back_populates="targets")


class StudentTask(Base):
    __tablename__ = "student_tasks"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_student_task"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    assignment_id = Column(
        UUID(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False
    )
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(Enum(TaskStatus), default=TaskStatus.pending)
    status_override = Column(Enum(TaskStatus), nullable=True)
    submitted_late = Column(Boolean, default=False)
    completion_at = Column(DateTime(timezone=True), nullable=True)
    progress_meta = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    assignment = relationship("Assignment", back_populates="tasks")
    student = relationship("Profile")
    items = relationship(
        "StudentTaskItem", back_populates="task", cascade="all, delete-orphan"
    )
    submissions = relationship(
        "TaskSubmission", back_populates="task", cascade="all, delete-orphan"
    )


class StudentTaskItem(Base):
    __tablename__ = "student_task_items"
    __table_args__ = (
        UniqueConstraint("student_task_id", "item_id", name="uq_student_task_item"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_task_id = Column(
        UUID(as_uuid=True), ForeignKey("student_tasks.id", ondelete="CASCADE"), nullable=False
    )
    item_id = Column(
        UUID(as_uuid=True), ForeignKey("workbook_items.id", ondelete="CASCADE"), nullable=False
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)
    score = Column(String, nullable=True)
    last_result = Column(String, nullable=True)
    note = Column(Text, nullable=True)

    task = relationship("StudentTask", back_populates="items")
    item = relationship("WorkbookItem")


class TaskSubmission(Base):
    __tablename__ = "task_submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_task_id = Column(
        UUID(as_uuid=True), ForeignKey("student_tasks.id", ondelete="CASCADE"), nullable=False
    )
    item_id = Column(
        UUID(as_uuid=True), ForeignKey("workbook_items.id", ondelete="SET NULL"), nullable=True
    )
    submission_type = Column(String, default="text")
    content = Column(Text, nullable=True)
    score = Column(Enum(EvaluationScore, values_callable=lambda e: [m.value for m in e]), nullable=True)
    feedback = Column(Text, nullable=True)
    evaluated_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    evaluated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    task = relationship("StudentTask", back_populates="submissions")
