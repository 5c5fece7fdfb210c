from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from academy.models.learning_journal import (
    AnnualScheduleCategory,
    CommentScope,
    JournalEntryStatus,
    JournalPeriodStatus,
)
from academy.models.lms import JournalSubject

MONTH_TOKEN = r"^\d{4}-(0[1-9]|1[0-2])$"


# ==================== PERIODS ====================


class PeriodCreate(BaseModel):
    class_ids: List[UUID] = Field(..., min_length=1)
    start_date: date
    label: Optional[str] = Field(None, max_length=100)


class PeriodUpdate(BaseModel):
    start_date: Optional[date] = None
    label: Optional[str] = Field(None, max_length=100)
    status: Optional[JournalPeriodStatus] = None


class PeriodResponse(BaseModel):
    id: UUID
    class_id: UUID
    start_date: date
    end_date: date
    label: Optional[str] = None
    status: JournalPeriodStatus
    locked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== ENTRIES ====================


class EntryStatusChange(BaseModel):
    status: JournalEntryStatus
    note: Optional[str] = Field(None, max_length=2000)


class CommentUpsert(BaseModel):
    role_scope: CommentScope
    subject: Optional[JournalSubject] = None
    body: str = Field(..., min_length=1, max_length=4000)

    @model_validator(mode="after")
    def check_subject(self):
        if self.role_scope == CommentScope.homeroom and self.subject is not None:
            raise ValueError("Homeroom comments cannot have a subject")
        if self.role_scope == CommentScope.subject and self.subject is None:
            raise ValueError("Subject comments require a subject")
        return self


class CommentResponse(BaseModel):
    id: UUID
    entry_id: UUID
    role_scope: CommentScope
    subject: Optional[JournalSubject] = None
    teacher_id: Optional[UUID] = None
    body: str
    updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EntryLogResponse(BaseModel):
    id: UUID
    previous_status: Optional[JournalEntryStatus] = None
    next_status: JournalEntryStatus
    changed_by: Optional[UUID] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EntryResponse(BaseModel):
    id: UUID
    period_id: UUID
    student_id: UUID
    status: JournalEntryStatus
    completion_rate: Optional[float] = None
    submitted_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    last_generated_at: Optional[datetime] = None
    summary: Optional[Dict[str, Any]] = None
    weekly: Optional[Dict[str, Any]] = None
    share_token: Optional[str] = None

    class Config:
        from_attributes = True


class EntryDetailResponse(EntryResponse):
    comments: List[CommentResponse] = []
    logs: List[EntryLogResponse] = []


# ==================== WEEK TEMPLATES ====================


class WeekTemplateUpsert(BaseModel):
    class_id: UUID
    period_id: UUID
    week_index: int = Field(..., ge=1, le=4)
    subject: JournalSubject
    material_ids: List[str] = []
    material_titles: List[str] = []
    material_notes: Optional[str] = Field(None, max_length=2000)


class WeekTemplateResponse(BaseModel):
    id: UUID
    class_id: UUID
    period_id: UUID
    week_index: int
    subject: JournalSubject
    material_ids: List[str] = []
    material_titles: List[str] = []
    material_notes: Optional[str] = None

    class Config:
        from_attributes = True


# ==================== GREETINGS / EVENTS / SCHEDULES ====================


class GreetingUpsert(BaseModel):
    month_token: str = Field(..., pattern=MONTH_TOKEN)
    message: str = Field(..., min_length=10, max_length=2000)


class GreetingResponse(BaseModel):
    id: UUID
    month_token: str
    message: str
    principal_id: Optional[UUID] = None
    published_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AcademicEventCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    start_date: date
    end_date: Optional[date] = None
    memo: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before the start date")
        return self


class AcademicEventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    memo: Optional[str] = Field(None, max_length=2000)


class AcademicEventResponse(BaseModel):
    id: UUID
    month_token: str
    title: str
    start_date: date
    end_date: Optional[date] = None
    memo: Optional[str] = None

    class Config:
        from_attributes = True


class AnnualScheduleCreate(BaseModel):
    period_label: str = Field(..., min_length=1, max_length=50)
    start_date: date
    end_date: date
    tuition_due_date: Optional[date] = None
    tuition_amount: Optional[int] = Field(None, ge=0)
    memo: Optional[str] = Field(None, max_length=2000)
    category: AnnualScheduleCategory = AnnualScheduleCategory.annual
    display_order: int = 0

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before the start date")
        return self


class AnnualScheduleUpdate(BaseModel):
    period_label: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tuition_due_date: Optional[date] = None
    tuition_amount: Optional[int] = Field(None, ge=0)
    memo: Optional[str] = Field(None, max_length=2000)
    category: Optional[AnnualScheduleCategory] = None
    display_order: Optional[int] = None


class AnnualScheduleResponse(BaseModel):
    id: UUID
    period_label: str
    start_date: date
    end_date: date
    tuition_due_date: Optional[date] = None
    tuition_amount: Optional[int] = None
    memo: Optional[str] = None
    category: AnnualScheduleCategory
    display_order: int = 0

    class Config:
        from_attributes = True
