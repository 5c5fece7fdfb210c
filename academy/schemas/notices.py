from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from academy.core.security import is_image_attachment

MAX_ATTACHMENT_TOTAL_BYTES = 50 * 1024 * 1024
FIELD_TYPES = ("text", "textarea", "select", "checkbox")


class ApplicationField(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    label: str = Field(..., min_length=1, max_length=200)
    type: str = "text"
    required: bool = False
    options: List[str] = []

    @model_validator(mode="after")
    def check_type(self):
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unsupported field type: {self.type}")
        if self.type == "select":
            options = [option.strip() for option in self.options if option and option.strip()]
            if not options:
                raise ValueError(f"Field '{self.label}' needs at least one option")
            self.options = options
        return self


class ApplicationConfig(BaseModel):
    fields: List[ApplicationField] = []

    @model_validator(mode="after")
    def check_unique_ids(self):
        ids = [f.id for f in self.fields]
        if len(ids) != len(set(ids)):
            raise ValueError("Application field ids must be unique")
        return self


class AttachmentInput(BaseModel):
    file_path: str = Field(..., min_length=1, max_length=500)
    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: Optional[str] = None
    size: int = Field(0, ge=0)


def _check_attachments(attachments: List[AttachmentInput]) -> None:
    for attachment in attachments:
        if not is_image_attachment(attachment.file_name, attachment.mime_type):
            raise ValueError(f"Only image attachments are allowed ({attachment.file_name})")
    if sum(a.size for a in attachments) > MAX_ATTACHMENT_TOTAL_BYTES:
        raise ValueError("Attachments cannot exceed 50MB in total")


class NoticeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)
    recipient_ids: List[UUID] = []
    target_scope: Optional[str] = Field(None, max_length=100)
    requires_application: bool = False
    application_config: Optional[ApplicationConfig] = None
    application_deadline: Optional[datetime] = None
    max_applicants: Optional[int] = Field(None, ge=1)
    attachments: List[AttachmentInput] = []

    @model_validator(mode="after")
    def check_notice(self):
        if not self.title.strip():
            raise ValueError("Title is required")
        if not self.body.strip():
            raise ValueError("Body is required")
        _check_attachments(self.attachments)
        return self


class NoticeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    body: Optional[str] = Field(None, min_length=1)
    target_scope: Optional[str] = Field(None, max_length=100)
    application_config: Optional[ApplicationConfig] = None
    application_deadline: Optional[datetime] = None
    max_applicants: Optional[int] = Field(None, ge=1)
    attachments: Optional[List[AttachmentInput]] = None

    @model_validator(mode="after")
    def check_attachments(self):
        if self.attachments is not None:
            _check_attachments(self.attachments)
        return self


class NoticeApplicationCreate(BaseModel):
    form_data: Dict[str, Any] = {}


class AttachmentResponse(BaseModel):
    id: UUID
    file_path: str
    file_name: str
    mime_type: Optional[str] = None
    size: int = 0

    class Config:
        from_attributes = True


class NoticeRecipientResponse(BaseModel):
    recipient_id: UUID
    acknowledged_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NoticeApplicationResponse(BaseModel):
    id: UUID
    notice_id: UUID
    applicant_id: UUID
    form_data: Dict[str, Any] = {}
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NoticeResponse(BaseModel):
    id: UUID
    author_id: UUID
    title: str
    body: str
    target_scope: Optional[str] = None
    requires_application: bool = False
    application_config: Optional[Dict[str, Any]] = None
    application_deadline: Optional[datetime] = None
    max_applicants: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attachments: List[AttachmentResponse] = []
    recipients: List[NoticeRecipientResponse] = []

    class Config:
        from_attributes = True
