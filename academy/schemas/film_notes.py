import re
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from academy.models.film_notes import FilmNoteSource
from academy.services.film_notes import sanitize_film_value

YEAR_PATTERN = re.compile(r"^\d{4}$")


class FilmNoteEntry(BaseModel):
    title: str = Field("", max_length=200)
    director: str = Field("", max_length=200)
    release_year: str = Field("", max_length=4)
    genre: str = Field("", max_length=200)
    country: str = Field("", max_length=200)
    summary: str = Field("", max_length=5000)
    favorite_scene: str = Field("", max_length=5000)

    @field_validator("*", mode="before")
    @classmethod
    def clean(cls, value):
        if value is None or isinstance(value, str):
            return sanitize_film_value(value)
        return value

    @field_validator("release_year")
    @classmethod
    def check_year(cls, value: str) -> str:
        if value and not YEAR_PATTERN.match(value):
            raise ValueError("Release year must be four digits")
        return value


class FilmNoteSave(BaseModel):
    content: FilmNoteEntry


class FilmNoteResponse(BaseModel):
    id: UUID
    source: FilmNoteSource
    content: Dict[str, str]
    completed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FilmHistoryEntryResponse(BaseModel):
    note_index: int
    content: Dict[str, str]
    completed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FilmHistoryResponse(BaseModel):
    task_id: UUID
    status: str
    workbook_id: UUID
    workbook_title: str
    prompt: Optional[str] = None
    note_count: int
    due_at: Optional[datetime] = None
    entries: List[FilmHistoryEntryResponse]
    completed_count: int
