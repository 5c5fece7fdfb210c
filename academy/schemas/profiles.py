from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field
from academy.models.profiles import UserRole, ProfileStatus


class ProfileBase(BaseModel):
    email: str
    name: Optional[str] = None
    role: UserRole
    status: ProfileStatus
    student_phone: Optional[str] = None
    parent_phone: Optional[str] = None
    parent_email: Optional[str] = None


class ProfileResponse(ProfileBase):
    id: UUID
    academy_record: Optional[str] = None
    photo_url: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileSummary(BaseModel):
    id: UUID
    name: Optional[str] = None
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=60)
    student_phone: Optional[str] = None
    parent_phone: Optional[str] = None
    parent_email: Optional[str] = None
    academy_record: Optional[str] = Field(None, max_length=4000)
    role: Optional[UserRole] = None


class ApproveMemberRequest(BaseModel):
    class_ids: List[UUID] = []


class MemberClassesUpdate(BaseModel):
    class_ids: List[UUID] = []
