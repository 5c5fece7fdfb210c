from typing import Any, Dict, List, Literal, Optional
from uuid import UUID
from datetime import date, datetime, time
from pydantic import BaseModel, Field, field_validator
from academy.core.security import normalize_phone
from academy.models.counseling import (
    CounselingQuestionFieldType,
    CounselingReservationStatus,
    CounselingSlotStatus,
)
from academy.schemas.enrollment import MOBILE_PATTERN


# ==================== SLOTS ====================


class CounselingSlotsCreate(BaseModel):
    counseling_date: date
    times: List[str] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=500)


class CounselingSlotStatusUpdate(BaseModel):
    status: CounselingSlotStatus


class CounselingSlotNotesUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=500)


class CounselingSlotDuplicate(BaseModel):
    target_date: date


class CounselingSlotResponse(BaseModel):
    id: UUID
    counseling_date: date
    start_time: time
    duration_minutes: int
    status: CounselingSlotStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== RESERVATIONS ====================


class CounselingReservationCreate(BaseModel):
    """Public reservation form"""

    slot_id: UUID
    student_name: str = Field(..., min_length=1, max_length=60)
    contact_phone: str
    academic_record: Optional[str] = Field(None, max_length=200)
    target_university: Optional[str] = Field(None, max_length=200)
    question: Optional[str] = Field(None, max_length=500)
    additional_answers: Optional[Dict[str, Any]] = None

    @field_validator("student_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Student name is required")
        return value

    @field_validator("contact_phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        digits = normalize_phone(value)
        if not MOBILE_PATTERN.match(digits):
            raise ValueError("Contact phone must be a mobile number starting with 01")
        return digits

    @field_validator("additional_answers")
    @classmethod
    def stringify_answers(cls, value: Optional[Dict[str, Any]]) -> Dict[str, str]:
        if not value:
            return {}
        return {key: str(raw) for key, raw in value.items() if raw is not None}


class CounselingReservationStatusUpdate(BaseModel):
    status: CounselingReservationStatus


class CounselingReservationMemoUpdate(BaseModel):
    memo: Optional[str] = Field(None, max_length=1000)


class CounselingReservationResponse(BaseModel):
    id: UUID
    slot_id: UUID
    student_name: str
    contact_phone: str
    academic_record: Optional[str] = None
    target_university: Optional[str] = None
    question: Optional[str] = None
    additional_answers: Dict[str, Any] = {}
    status: CounselingReservationStatus
    managed_by: Optional[UUID] = None
    managed_at: Optional[datetime] = None
    memo: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CounselingSlotWithReservations(CounselingSlotResponse):
    reservations: List[CounselingReservationResponse] = []


# ==================== QUESTIONS ====================


class CounselingQuestionCreate(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=200)
    field_type: CounselingQuestionFieldType = CounselingQuestionFieldType.text
    is_required: bool = False

    @field_validator("prompt")
    @classmethod
    def strip_prompt(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Question text is required")
        return value


class CounselingQuestionUpdate(CounselingQuestionCreate):
    is_active: bool = True


class CounselingQuestionMove(BaseModel):
    direction: Literal["up", "down"]


class CounselingQuestionResponse(BaseModel):
    id: UUID
    field_key: str
    prompt: str
    field_type: CounselingQuestionFieldType
    is_required: bool
    is_active: bool
    position: int

    class Config:
        from_attributes = True
