from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field


class ClassBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    homeroom_teacher_id: Optional[UUID] = None


class ClassCreate(ClassBase):
    teacher_ids: List[UUID] = []
    student_ids: List[UUID] = []


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    homeroom_teacher_id: Optional[UUID] = None
    teacher_ids: Optional[List[UUID]] = None
    student_ids: Optional[List[UUID]] = None


class ClassTeacherResponse(BaseModel):
    teacher_id: UUID
    is_homeroom: bool = False

    class Config:
        from_attributes = True


class ClassStudentResponse(BaseModel):
    student_id: UUID

    class Config:
        from_attributes = True


class ClassResponse(ClassBase):
    id: UUID
    created_at: Optional[datetime] = None
    teachers: List[ClassTeacherResponse] = []
    students: List[ClassStudentResponse] = []

    class Config:
        from_attributes = True
