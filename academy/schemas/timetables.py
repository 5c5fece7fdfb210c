from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


def _strip_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


class TimetableCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _strip_name(value)


class TimetableTeacherAdd(BaseModel):
    teacher_id: UUID


class TimetablePeriodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _strip_name(value)


class TimetableCellAssign(BaseModel):
    teacher_column_id: UUID
    period_id: UUID
    class_ids: List[UUID] = Field(..., min_length=1)

    @field_validator("class_ids")
    @classmethod
    def dedupe_classes(cls, value: List[UUID]) -> List[UUID]:
        value = list(dict.fromkeys(value))
        if len(value) > 10:
            raise ValueError("A period can hold at most 10 classes")
        return value


class TimetableTeacherColumnResponse(BaseModel):
    id: UUID
    timetable_id: UUID
    teacher_id: UUID
    position: int
    teacher_name: Optional[str] = None
    teacher_email: Optional[str] = None


class TimetablePeriodResponse(BaseModel):
    id: UUID
    timetable_id: UUID
    name: str
    position: int

    class Config:
        from_attributes = True


class TimetableAssignmentResponse(BaseModel):
    id: UUID
    timetable_id: UUID
    teacher_column_id: UUID
    period_id: UUID
    class_id: UUID
    class_name: Optional[str] = None


class TimetableResponse(BaseModel):
    id: UUID
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    teacher_columns: List[TimetableTeacherColumnResponse] = []
    periods: List[TimetablePeriodResponse] = []
    assignments: List[TimetableAssignmentResponse] = []
