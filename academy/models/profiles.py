from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Enum as SQLAEnum,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from academy.core.database import Base


class UserRole(str, enum.Enum):
    principal = "principal"
    manager = "manager"
    teacher = "teacher"
    student = "student"


class ProfileStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    withdrawn = "withdrawn"


MANAGER_ROLES = [UserRole.manager.value, UserRole.principal.value]
STAFF_ROLES = [UserRole.teacher.value, UserRole.manager.value, UserRole.principal.value]


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    role = Column(SQLAEnum(UserRole), nullable=False, default=UserRole.student)
    status = Column(SQLAEnum(ProfileStatus), nullable=False, default=ProfileStatus.pending)

    student_phone = Column(String, nullable=True)
    parent_phone = Column(String, nullable=True)
    parent_email = Column(String, nullable=True)
    academy_record = Column(Text, nullable=True)
    photo_url = Column(String, nullable=True)  # storage object path

    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    class_memberships = relationship(
        "ClassStudent", back_populates="student", cascade="all, delete-orphan"
    )
    teaching_assignments = relationship(
        "ClassTeacher", back_populates="teacher", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email
