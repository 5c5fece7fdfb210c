from typing import Optional
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, Field
from academy.models.absences import AbsenceReasonType


class AbsenceReportCreate(BaseModel):
    class_id: UUID
    student_id: UUID
    absence_date: date
    reason_type: AbsenceReasonType
    detail_reason: Optional[str] = Field(None, max_length=2000)
    teacher_action: Optional[str] = Field(None, max_length=2000)
    manager_action: Optional[str] = Field(None, max_length=2000)


class AbsenceReportUpdate(BaseModel):
    absence_date: Optional[date] = None
    reason_type: Optional[AbsenceReasonType] = None
    detail_reason: Optional[str] = Field(None, max_length=2000)
    teacher_action: Optional[str] = Field(None, max_length=2000)
    manager_action: Optional[str] = Field(None, max_length=2000)


class AbsenceReportResponse(BaseModel):
    id: UUID
    class_id: UUID
    student_id: UUID
    absence_date: date
    reason_type: AbsenceReasonType
    detail_reason: Optional[str] = None
    teacher_action: Optional[str] = None
    manager_action: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class_name: Optional[str] = None
    student_name: Optional[str] = None

    class Config:
        from_attributes = True
