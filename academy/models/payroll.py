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


class WorkLogStatus(str, enum.Enum):
    work = "work"
    substitute = "substitute"
    absence = "absence"
    tardy = "tardy"


class WorkLogReviewStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class SubstituteType(str, enum.Enum):
    internal = "internal"
    external = "external"


class ExternalPayStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class ContractType(str, enum.Enum):
    employee = "employee"
    freelancer = "freelancer"
    none = "none"


class PayrollRunStatus(str, enum.Enum):
    draft = "draft"
    pending_ack = "pending_ack"
    confirmed = "confirmed"
    paid = "paid"


class PayrollItemKind(str, enum.Enum):
    earning = "earning"
    deduction = "deduction"
    info = "info"


class PayrollAckStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"


class WorkLogEntry(Base):
    __tablename__ = "work_log_entries"
    __table_args__ = (
        UniqueConstraint("teacher_id", "work_date", name="uq_work_log_teacher_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    work_date = Column(Date, nullable=False, index=True)
    status = Column(Enum(WorkLogStatus), nullable=False)
    work_hours = Column(Float, nullable=True)

    substitute_type = Column(Enum(SubstituteType), nullable=True)
    substitute_teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    external_teacher_name = Column(String, nullable=True)
    external_teacher_phone = Column(String, nullable=True)
    external_teacher_bank = Column(String, nullable=True)
    external_teacher_account = Column(String, nullable=True)
    external_teacher_hours = Column(Float, nullable=True)
    external_teacher_pay_status = Column(
        Enum(ExternalPayStatus), default=ExternalPayStatus.pending
    )
    notes = Column(Text, nullable=True)

    review_status = Column(Enum(WorkLogReviewStatus), default=WorkLogReviewStatus.pending)
    review_note = Column(Text, nullable=True)
    reviewed_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("Profile", foreign_keys=[teacher_id])


class TeacherPayrollProfile(Base):
    __tablename__ = "teacher_payroll_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    hourly_rate = Column(Float, nullable=False, default=0)
    hourly_currency = Column(String, default="KRW")
    base_salary_amount = Column(Float, nullable=True)
    base_salary_currency = Column(String, default="KRW")
    contract_type = Column(Enum(ContractType), default=ContractType.none)
    insurance_enrolled = Column(Boolean, default=False)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class TeacherPayrollRun(Base):
    __tablename__ = "teacher_payroll_runs"
    __table_args__ = (
        UniqueConstraint("teacher_id", "period_start", name="uq_payroll_run_teacher_period"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    payroll_profile_id = Column(
        UUID(as_uuid=True),
        ForeignKey("teacher_payroll_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    contract_type = Column(Enum(ContractType), nullable=False)
    insurance_enrolled = Column(Boolean, default=False)

    hourly_total = Column(Float, default=0)
    weekly_holiday_allowance = Column(Float, default=0)
    base_salary_total = Column(Float, default=0)
    adjustment_total = Column(Float, default=0)
    gross_pay = Column(Float, default=0)
    deductions_total = Column(Float, default=0)
    net_pay = Column(Float, default=0)

    status = Column(Enum(PayrollRunStatus), default=PayrollRunStatus.draft)
    message_preview = Column(Text, nullable=True)
    meta = Column(JSON, default=dict)
    requested_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    requested_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    paid_at = Column(DateTime(timezone=True), nullable=True)
    paid_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("Profile", foreign_keys=[teacher_id])
    items = relationship(
        "TeacherPayrollRunItem",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="TeacherPayrollRunItem.order_index",
    )
    acknowledgement = relationship(
        "TeacherPayrollAcknowledgement",
        back_populates="run",
        uselist=False,
        cascade="all, delete-orphan",
    )


class TeacherPayrollRunItem(Base):
    __tablename__ = "teacher_payroll_run_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    run_id = Column(
        UUID(as_uuid=True),
        ForeignKey("teacher_payroll_runs.id", ondelete="CASCADE"),
        nullable=False,
    )
    item_kind = Column(Enum(PayrollItemKind), nullable=False)
    label = Column(String, nullable=False)
    amount = Column(Float, default=0)
    item_metadata = Column("metadata", JSON, default=dict)
    order_index = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    run = relationship("TeacherPayrollRun", back_populates="items")


class TeacherPayrollAcknowledgement(Base):
    __tablename__ = "teacher_payroll_acknowledgements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    run_id = Column(
        UUID(as_uuid=True),
        ForeignKey("teacher_payroll_runs.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    teacher_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(Enum(PayrollAckStatus), default=PayrollAckStatus.pending)
    requested_at = Column(DateTime(timezone=True), nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    note = Column(Text, nullable=True)
    updated_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    run = relationship("TeacherPayrollRun", back_populates="acknowledgement")
