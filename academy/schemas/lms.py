from typing import List, Optional, Any, Dict
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from academy.models.lms import (
    AnswerType,
    EvaluationScore,
    JournalSubject,
    TargetScope,
    TaskStatus,
    WorkbookType,
)


# ==================== WORKBOOKS ====================


class ChoiceOption(BaseModel):
    label: str = Field(..., min_length=1, max_length=500)
    is_correct: bool = False


class ShortField(BaseModel):
    label: str = Field(..., min_length=1, max_length=200)
    answer: Optional[str] = Field(None, max_length=500)


class WorkbookItemBase(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=4000)
    explanation: Optional[str] = Field(None, max_length=4000)
    answer_type: AnswerType = AnswerType.text
    choices: List[ChoiceOption] = []
    short_fields: List[ShortField] = []
    grading_criteria: Optional[Dict[str, Any]] = None


class WorkbookItemCreate(WorkbookItemBase):
    pass


class WorkbookItemResponse(WorkbookItemBase):
    id: UUID
    position: int

    class Config:
        from_attributes = True


class WorkbookBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    subject: JournalSubject
    type: WorkbookType
    week_label: Optional[str] = Field(None, max_length=50)
    tags: List[str] = []
    summary: Optional[str] = Field(None, max_length=2000)
    config: Dict[str, Any] = {}


class WorkbookCreate(WorkbookBase):
    items: List[WorkbookItemCreate] = []

    @model_validator(mode="after")
    def check_srs_items(self):
        if self.type == WorkbookType.srs:
            for index, item in enumerate(self.items, start=1):
                if not any(choice.is_correct for choice in item.choices):
                    raise ValueError(f"Question {index} needs at least one correct choice")
        return self


class WorkbookUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    subject: Optional[JournalSubject] = None
    week_label: Optional[str] = Field(None, max_length=50)
    tags: Optional[List[str]] = None
    summary: Optional[str] = Field(None, max_length=2000)
    config: Optional[Dict[str, Any]] = None


class WorkbookItemsUpdate(BaseModel):
    items: List[WorkbookItemCreate]


class WorkbookResponse(WorkbookBase):
    id: UUID
    teacher_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[WorkbookItemResponse] = []

    class Config:
        from_attributes = True


# ==================== ASSIGNMENTS ====================


class AssignmentCreate(BaseModel):
    workbook_id: UUID
    due_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    target_class_ids: List[UUID] = []
    target_student_ids: List[UUID] = []

    @model_validator(mode="after")
    def check_targets(self):
        if not self.target_class_ids and not self.target_student_ids:
            raise ValueError("Select at least one class or student")
        return self


class AssignmentDatesUpdate(BaseModel):
    due_at: Optional[datetime] = None
    published_at: Optional[datetime] = None


class StudentTaskItemResponse(BaseModel):
    id: UUID
    item_id: UUID
    completed_at: Optional[datetime] = None
    score: Optional[str] = None
    last_result: Optional[str] = None

    class Config:
        from_attributes = True


class StudentTaskResponse(BaseModel):
    id: UUID
    assignment_id: UUID
    student_id: UUID
    status: TaskStatus
    status_override: Optional[TaskStatus] = None
    submitted_late: bool = False
    completion_at: Optional[datetime] = None
    items: List[StudentTaskItemResponse] = []

    class Config:
        from_attributes = True


class AssignmentResponse(BaseModel):
    id: UUID
    workbook_id: UUID
    assigned_by: Optional[UUID] = None
    due_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    target_scope: Optional[TargetScope] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssignmentWithTasks(AssignmentResponse):
    tasks: List[StudentTaskResponse] = []


# ==================== EVALUATION ====================


class EvaluationRequest(BaseModel):
    score: EvaluationScore
    feedback: Optional[str] = Field(None, max_length=2000)


class ReviewStateUpdate(BaseModel):
    status_override: Optional[TaskStatus] = None
    submitted_late: Optional[bool] = None

    @model_validator(mode="after")
    def check_override(self):
        if self.status_override == TaskStatus.canceled:
            raise ValueError("Use the cancel toggle to cancel a task")
        return self


# ==================== SUBMISSIONS ====================


class TextSubmissionCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)


class TaskSubmissionResponse(BaseModel):
    id: UUID
    student_task_id: UUID
    item_id: Optional[UUID] = None
    submission_type: str
    content: Optional[str] = None
    score: Optional[EvaluationScore] = None
    feedback: Optional[str] = None
    evaluated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
