from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from academy.models.community import CulturePickCategory


def _check_http_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not (value.startswith("http://") or value.startswith("https://")):
        raise ValueError("Links must start with http:// or https://")
    return value


# ==================== CULTURE PICKS ====================


class CulturePickCreate(BaseModel):
    category: CulturePickCategory
    title: str = Field(..., min_length=1, max_length=200)
    creator: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    cover_url: Optional[str] = None
    external_link: Optional[str] = None
    period_label: str = Field(..., min_length=1, max_length=50)

    @field_validator("cover_url", "external_link")
    @classmethod
    def check_links(cls, value: Optional[str]) -> Optional[str]:
        return _check_http_url(value)

    @field_validator("title", "creator", "period_label")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value


class CulturePickUpdate(BaseModel):
    category: Optional[CulturePickCategory] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    creator: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    cover_url: Optional[str] = None
    external_link: Optional[str] = None
    period_label: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("cover_url", "external_link")
    @classmethod
    def check_links(cls, value: Optional[str]) -> Optional[str]:
        return _check_http_url(value)


class CulturePickResponse(BaseModel):
    id: UUID
    category: CulturePickCategory
    title: str
    creator: str
    description: Optional[str] = None
    cover_url: Optional[str] = None
    external_link: Optional[str] = None
    period_label: str
    teacher_id: UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewUpsert(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)


class ReviewResponse(BaseModel):
    id: UUID
    pick_id: UUID
    user_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewCommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=1000)
    parent_id: Optional[UUID] = None


class ReviewCommentUpdate(BaseModel):
    body: str = Field(..., min_length=1, max_length=1000)


class ReviewCommentResponse(BaseModel):
    id: UUID
    review_id: UUID
    parent_id: Optional[UUID] = None
    user_id: UUID
    body: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== PHOTO DIARY ====================


class PhotoDiaryCreate(BaseModel):
    class_id: UUID
    caption: Optional[str] = Field(None, max_length=2000)
    image_paths: List[str] = Field(..., min_length=1)


class PhotoDiaryCommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=1000)


class PhotoDiaryCommentResponse(BaseModel):
    id: UUID
    entry_id: UUID
    user_id: UUID
    body: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PhotoDiaryResponse(BaseModel):
    id: UUID
    class_id: Optional[UUID] = None
    author_id: UUID
    caption: Optional[str] = None
    image_paths: List[str] = []
    created_at: Optional[datetime] = None
    comments: List[PhotoDiaryCommentResponse] = []

    class Config:
        from_attributes = True


# ==================== ATELIER ====================


class AtelierPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    media_path: Optional[str] = Field(None, max_length=500)
    class_id: Optional[UUID] = None


class AtelierPostResponse(BaseModel):
    id: UUID
    student_id: UUID
    class_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    media_path: Optional[str] = None
    is_hidden: bool = False
    is_featured: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
