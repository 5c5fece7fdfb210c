from typing import List, Optional
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator, model_validator
from academy.models.materials import (
    AdmissionMaterialCategory,
    ClassMaterialAssetType,
    ClassMaterialSubject,
    PrintColorMode,
    PrintRequestStatus,
)

MAX_PRINT_COPIES = 100
ADMISSION_TYPES = ("early", "regular")


def _strip_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    return value


def _clean_path(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


# ==================== CLASS MATERIALS ====================


class ClassMaterialPostSave(BaseModel):
    """Create or fully replace a post; a null path removes that attachment"""

    subject: ClassMaterialSubject
    title: str = Field(..., min_length=1, max_length=200)
    week_label: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=5000)
    class_material_path: Optional[str] = Field(None, max_length=500)
    class_material_name: Optional[str] = Field(None, max_length=200)
    student_handout_path: Optional[str] = Field(None, max_length=500)
    student_handout_name: Optional[str] = Field(None, max_length=200)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return _strip_title(value)

    @field_validator("class_material_path", "student_handout_path")
    @classmethod
    def clean_path(cls, value: Optional[str]) -> Optional[str]:
        return _clean_path(value)


class ClassMaterialPostResponse(BaseModel):
    id: UUID
    subject: ClassMaterialSubject
    week_label: Optional[str] = None
    title: str
    description: Optional[str] = None
    class_material_path: Optional[str] = None
    class_material_name: Optional[str] = None
    student_handout_path: Optional[str] = None
    student_handout_name: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PrintRequestCreate(BaseModel):
    assets: List[ClassMaterialAssetType] = Field(..., min_length=1)
    copies: int = 1
    color_mode: PrintColorMode = PrintColorMode.bw
    desired_date: Optional[date] = None
    desired_period: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("assets")
    @classmethod
    def dedupe_assets(cls, value: List[ClassMaterialAssetType]) -> List[ClassMaterialAssetType]:
        return list(dict.fromkeys(value))

    @field_validator("copies")
    @classmethod
    def clamp_copies(cls, value: int) -> int:
        if value < 1:
            return 1
        return min(value, MAX_PRINT_COPIES)


class PrintRequestStatusUpdate(BaseModel):
    status: PrintRequestStatus

    @field_validator("status")
    @classmethod
    def check_status(cls, value: PrintRequestStatus) -> PrintRequestStatus:
        if value in (PrintRequestStatus.requested, PrintRequestStatus.canceled):
            raise ValueError("Use cancel to withdraw a request")
        return value


class PrintRequestItemResponse(BaseModel):
    id: UUID
    asset_type: ClassMaterialAssetType
    asset_path: str
    asset_filename: Optional[str] = None

    class Config:
        from_attributes = True


class PrintRequestResponse(BaseModel):
    id: UUID
    post_id: UUID
    requested_by: UUID
    copies: int
    color_mode: PrintColorMode
    desired_date: Optional[date] = None
    desired_period: Optional[str] = None
    notes: Optional[str] = None
    status: PrintRequestStatus
    handled_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    items: List[PrintRequestItemResponse] = []

    class Config:
        from_attributes = True


# ==================== ADMISSION MATERIALS ====================


class AdmissionScheduleIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    start_at: datetime
    end_at: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    memo: Optional[str] = Field(None, max_length=1000)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Schedule title is required")
        return value

    @model_validator(mode="after")
    def check_range(self):
        if self.end_at and self.end_at < self.start_at:
            raise ValueError("A schedule cannot end before it starts")
        return self


class AdmissionMaterialPostSave(BaseModel):
    """Create or fully replace a post together with its schedules"""

    category: AdmissionMaterialCategory
    title: str = Field(..., min_length=1, max_length=200)
    target_level: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    past_exam_year: Optional[int] = None
    past_exam_university: Optional[str] = Field(None, max_length=100)
    past_exam_admission_types: Optional[List[str]] = None
    guide_path: Optional[str] = Field(None, max_length=500)
    guide_name: Optional[str] = Field(None, max_length=200)
    resource_path: Optional[str] = Field(None, max_length=500)
    resource_name: Optional[str] = Field(None, max_length=200)
    schedules: List[AdmissionScheduleIn] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return _strip_title(value)

    @field_validator("guide_path", "resource_path")
    @classmethod
    def clean_path(cls, value: Optional[str]) -> Optional[str]:
        return _clean_path(value)

    @model_validator(mode="after")
    def check_category_fields(self):
        if self.target_level is not None:
            self.target_level = self.target_level.strip() or None

        if self.category == AdmissionMaterialCategory.guideline:
            if not self.target_level:
                raise ValueError("Enter the university name")
            self.past_exam_year = None
            self.past_exam_university = None
            self.past_exam_admission_types = None
            return self

        if self.past_exam_year is None:
            raise ValueError("Select the exam year")
        if not 2000 <= self.past_exam_year <= 2100:
            raise ValueError("Check the exam year")
        university = (self.past_exam_university or "").strip()
        if not university:
            raise ValueError("Select the university")
        self.past_exam_university = university
        types = [t.strip() for t in self.past_exam_admission_types or [] if t and t.strip()]
        if not types:
            raise ValueError("Select early or regular admission")
        if any(t not in ADMISSION_TYPES for t in types):
            raise ValueError("Admission type must be early or regular")
        self.past_exam_admission_types = list(dict.fromkeys(types))
        return self


class AdmissionScheduleResponse(BaseModel):
    id: UUID
    post_id: UUID
    title: str
    start_at: datetime
    end_at: Optional[datetime] = None
    location: Optional[str] = None
    memo: Optional[str] = None

    class Config:
        from_attributes = True


class AdmissionMaterialPostResponse(BaseModel):
    id: UUID
    category: AdmissionMaterialCategory
    target_level: Optional[str] = None
    title: str
    description: Optional[str] = None
    past_exam_year: Optional[int] = None
    past_exam_university: Optional[str] = None
    past_exam_admission_types: Optional[List[str]] = None
    guide_path: Optional[str] = None
    guide_name: Optional[str] = None
    resource_path: Optional[str] = None
    resource_name: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    schedules: List[AdmissionScheduleResponse] = []

    class Config:
        from_attributes = True
