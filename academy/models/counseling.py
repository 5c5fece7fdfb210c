from sqlalchemy import (
    Column,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    Integer,
    JSON,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from academy.core.database import Base


class CounselingSlotStatus(str, enum.Enum):
    open = "open"
    booked = "booked"
    closed = "closed"


class CounselingReservationStatus(str, enum.Enum):
    confirmed = "confirmed"
    completed = "completed"
    canceled = "canceled"


class CounselingQuestionFieldType(str, enum.Enum):
    text = "text"
    textarea = "textarea"


class CounselingSlot(Base):
    __tablename__ = "counseling_slots"
    __table_args__ = (
        UniqueConstraint("counseling_date", "start_time", name="uq_counseling_slot_date_time"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    counseling_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, default=30)
    status = Column(Enum(CounselingSlotStatus), default=CounselingSlotStatus.open)
    notes = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    updated_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    reservations = relationship(
        "CounselingReservation", back_populates="slot", cascade="all, delete-orphan"
    )


class CounselingReservation(Base):
    __tablename__ = "counseling_reservations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slot_id = Column(
        UUID(as_uuid=True), ForeignKey("counseling_slots.id", ondelete="CASCADE"), nullable=False
    )
    student_name = Column(String, nullable=False)
    contact_phone = Column(String, nullable=False)
    academic_record = Column(Text, nullable=True)
    target_university = Column(Text, nullable=True)
    question = Column(Text, nullable=True)
    # {field_key: answer} for the manager-defined questions
    additional_answers = Column(JSON, default=dict)
    status = Column(
        Enum(CounselingReservationStatus), default=CounselingReservationStatus.confirmed
    )
    managed_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    managed_at = Column(DateTime(timezone=True), nullable=True)
    memo = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    slot = relationship("CounselingSlot", back_populates="reservations")


class CounselingQuestion(Base):
    __tablename__ = "counseling_questions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    field_key = Column(String, nullable=False, unique=True)
    prompt = Column(String, nullable=False)
    field_type = Column(
        Enum(CounselingQuestionFieldType), default=CounselingQuestionFieldType.text
    )
    is_required = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    position = Column(Integer, nullable=False, default=10)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    updated_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
