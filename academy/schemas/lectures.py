import re
from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, computed_field, field_validator

YOUTUBE_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")


def youtube_video_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    match = YOUTUBE_ID_PATTERN.match(url)
    if match and len(match.group(2)) == 11:
        return match.group(2)
    return None


def _check_youtube_url(value: str) -> str:
    value = value.strip()
    if not youtube_video_id(value):
        raise ValueError("Enter a valid YouTube video link")
    return value


class LectureCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    youtube_url: str

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("youtube_url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _check_youtube_url(value)


class LectureUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    youtube_url: Optional[str] = None
    is_published: Optional[bool] = None

    @field_validator("youtube_url")
    @classmethod
    def check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _check_youtube_url(value)


class LectureResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    youtube_url: str
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def video_id(self) -> Optional[str]:
        return youtube_video_id(self.youtube_url)
