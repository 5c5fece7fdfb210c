from typing import Optional
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, Field
from academy.models.payroll import (
    ExternalPayStatus,
    SubstituteType,
    WorkLogReviewStatus,
    WorkLogStatus,
)


class WorkLogUpsert(BaseModel):
    work_date: date
    status: WorkLogStatus
    work_hours: Optional[float] = None
    substitute_type: Optional[SubstituteType] = None
    substitute_teacher_id: Optional[UUID] = None
    external_teacher_name: Optional[str] = Field(None, max_length=100)
    external_teacher_phone: Optional[str] = Field(None, max_length=30)
    external_teacher_bank: Optional[str] = Field(None, max_length=100)
    external_teacher_account: Optional[str] = Field(None, max_length=100)
    external_teacher_hours: Optional[float] = Field(None, ge=0, le=24)
    notes: Optional[str] = Field(None, max_length=2000)
    # managers may record entries on behalf of a teacher
    teacher_id: Optional[UUID] = None


class WorkLogReviewRequest(BaseModel):
    decision: WorkLogReviewStatus
    note: Optional[str] = Field(None, max_length=2000)


class BulkApproveRequest(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    teacher_id: Optional[UUID] = None


class ExternalPayStatusUpdate(BaseModel):
    status: ExternalPayStatus


class WorkLogResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    work_date: date
    status: WorkLogStatus
    work_hours: Optional[float] = None
    substitute_type: Optional[SubstituteType] = None
    substitute_teacher_id: Optional[UUID] = None
    external_teacher_name: Optional[str] = None
    external_teacher_phone: Optional[str] = None
    external_teacher_bank: Optional[str] = None
    external_teacher_account: Optional[str] = None
    external_teacher_hours: Optional[float] = None
    external_teacher_pay_status: Optional[ExternalPayStatus] = None
    notes: Optional[str] = None
    review_status: WorkLogReviewStatus
    review_note: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
