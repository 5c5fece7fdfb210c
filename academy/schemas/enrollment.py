import re
from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, field_validator, model_validator
from academy.models.enrollment import DesiredClass, EnrollmentStatus

MOBILE_PATTERN = re.compile(r"^01[0-9]{8,9}$")


def _normalize_mobile(value: Optional[str], label: str) -> Optional[str]:
    if value is None:
        return None
    digits = re.sub(r"\D", "", value)
    if not digits:
        return None
    if not MOBILE_PATTERN.match(digits):
        raise ValueError(f"{label} must be a valid mobile number (e.g. 010-1234-5678)")
    return digits


class EnrollmentApplicationCreate(BaseModel):
    student_name: str = Field(..., min_length=1, max_length=60)
    parent_phone: str
    parent_email: Optional[EmailStr] = None
    student_phone: Optional[str] = None
    desired_class: DesiredClass
    saturday_briefing_received: Optional[bool] = None
    schedule_fee_confirmed: bool

    @field_validator("student_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Student name is required")
        return value

    @field_validator("parent_phone")
    @classmethod
    def check_parent_phone(cls, value: str) -> str:
        normalized = _normalize_mobile(value, "Parent phone")
        if not normalized:
            raise ValueError("Parent phone is required")
        return normalized

    @field_validator("student_phone")
    @classmethod
    def check_student_phone(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_mobile(value, "Student phone")

    @model_validator(mode="after")
    def check_confirmations(self):
        if self.desired_class == DesiredClass.saturday and self.saturday_briefing_received is not True:
            raise ValueError("Please confirm you received the Saturday class briefing")
        if not self.schedule_fee_confirmed:
            raise ValueError("Please confirm the schedule and tuition")
        return self


class EnrollmentApplicationResponse(BaseModel):
    id: UUID
    student_name: str
    parent_phone: str
    parent_email: Optional[str] = None
    student_phone: Optional[str] = None
    desired_class: DesiredClass
    saturday_briefing_received: Optional[bool] = None
    schedule_fee_confirmed: bool
    status: EnrollmentStatus
    matched_profile_id: Optional[UUID] = None
    assigned_class_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
