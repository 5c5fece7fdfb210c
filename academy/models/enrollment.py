from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Enum,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
import enum
from academy.core.database import Base


class DesiredClass(str, enum.Enum):
    weekday = "weekday"
    saturday = "saturday"
    sunday = "sunday"
    regular = "regular"
    online = "online"


class EnrollmentStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"  # matched to a student profile
    assigned = "assigned"  # matched student already sits in a class


class EnrollmentApplication(Base):
    __tablename__ = "enrollment_applications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_name = Column(String, nullable=False)
    parent_phone = Column(String, nullable=False, index=True)
    parent_email = Column(String, nullable=True)
    student_phone = Column(String, nullable=True, index=True)
    desired_class = Column(Enum(DesiredClass), nullable=False)
    saturday_briefing_received = Column(Boolean, nullable=True)
    schedule_fee_confirmed = Column(Boolean, default=False)

    status = Column(Enum(EnrollmentStatus), default=EnrollmentStatus.pending)
    matched_profile_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    assigned_class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True
    )
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
