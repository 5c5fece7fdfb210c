from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from academy.core.database import Base


class Timetable(Base):
    __tablename__ = "timetables"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher_columns = relationship(
        "TimetableTeacher",
        back_populates="timetable",
        cascade="all, delete-orphan",
        order_by="TimetableTeacher.position",
    )
    periods = relationship(
        "TimetablePeriod",
        back_populates="timetable",
        cascade="all, delete-orphan",
        order_by="TimetablePeriod.position",
    )
    assignments = relationship(
        "TimetableAssignment", back_populates="timetable", cascade="all, delete-orphan"
    )


class TimetableTeacher(Base):
    """A teacher column in the grid"""

    __tablename__ = "timetable_teachers"
    __table_args__ = (
        UniqueConstraint("timetable_id", "teacher_id", name="uq_timetable_teacher"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    timetable_id = Column(
        UUID(as_uuid=True), ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False
    )
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)

    timetable = relationship("Timetable", back_populates="teacher_columns")
    teacher = relationship("Profile")
    assignments = relationship(
        "TimetableAssignment", back_populates="teacher_column", cascade="all, delete-orphan"
    )


class TimetablePeriod(Base):
    """A row in the grid"""

    __tablename__ = "timetable_periods"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    timetable_id = Column(
        UUID(as_uuid=True), ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    timetable = relationship("Timetable", back_populates="periods")
    assignments = relationship(
        "TimetableAssignment", back_populates="period", cascade="all, delete-orphan"
    )


class TimetableAssignment(Base):
    __tablename__ = "timetable_assignments"
    __table_args__ = (
        UniqueConstraint(
            "teacher_column_id", "period_id", "class_id", name="uq_timetable_assignment_cell_class"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    timetable_id = Column(
        UUID(as_uuid=True), ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False
    )
    teacher_column_id = Column(
        UUID(as_uuid=True), ForeignKey("timetable_teachers.id", ondelete="CASCADE"), nullable=False
    )
    period_id = Column(
        UUID(as_uuid=True), ForeignKey("timetable_periods.id", ondelete="CASCADE"), nullable=False
    )
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )

    timetable = relationship("Timetable", back_populates="assignments")
    teacher_column = relationship("TimetableTeacher", back_populates="assignments")
    period = relationship("TimetablePeriod", back_populates="assignments")
    class_ = relationship("Class")
