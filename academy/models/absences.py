from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from academy.core.database import Base


class AbsenceReasonType(str, enum.Enum):
    unexcused = "unexcused"
    event = "event"
    sick = "sick"
    other = "other"


class AbsenceReport(Base):
    __tablename__ = "absence_reports"
    __table_args__ = (
        UniqueConstraint("student_id", "absence_date", name="uq_absence_student_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    absence_date = Column(Date, nullable=False)
    reason_type = Column(Enum(AbsenceReasonType), nullable=False)
    detail_reason = Column(Text, nullable=True)
    teacher_action = Column(Text, nullable=True)
    manager_action = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    class_ = relationship("Class")
    student = relationship("Profile", foreign_keys=[student_id])
