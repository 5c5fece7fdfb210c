from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Integer,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from academy.core.database import Base


class Notice(Base):
    __tablename__ = "notices"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    author_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    target_scope = Column(String, nullable=True)  # e.g. "all", "teachers", "class:<id>"
    requires_application = Column(Boolean, default=False)
    # {"fields": [{"id", "label", "type", "required", "options"}]}
    application_config = Column(JSON, nullable=True)
    application_deadline = Column(DateTime(timezone=True), nullable=True)
    max_applicants = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    author = relationship("Profile")
    recipients = relationship(
        "NoticeRecipient", back_populates="notice", cascade="all, delete-orphan"
    )
    attachments = relationship(
        "NoticeAttachment", back_populates="notice", cascade="all, delete-orphan"
    )
    applications = relationship(
        "NoticeApplication", back_populates="notice", cascade="all, delete-orphan"
    )


class NoticeRecipient(Base):
    __tablename__ = "notice_recipients"
    __table_args__ = (
        UniqueConstraint("notice_id", "recipient_id", name="uq_notice_recipient"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    notice_id = Column(
        UUID(as_uuid=True), ForeignKey("notices.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    notice = relationship("Notice", back_populates="recipients")


class NoticeAttachment(Base):
    __tablename__ = "notice_attachments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    notice_id = Column(
        UUID(as_uuid=True), ForeignKey("notices.id", ondelete="CASCADE"), nullable=False
    )
    file_path = Column(String, nullable=False)  # storage object path
    file_name = Column(String, nullable=False)
    mime_type = Column(String, nullable=True)
    size = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    notice = relationship("Notice", back_populates="attachments")


class NoticeApplication(Base):
    __tablename__ = "notice_applications"
    __table_args__ = (
        UniqueConstraint("notice_id", "applicant_id", name="uq_notice_application"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    notice_id = Column(
        UUID(as_uuid=True), ForeignKey("notices.id", ondelete="CASCADE"), nullable=False
    )
    applicant_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    form_data = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    notice = relationship("Notice", back_populates="applications")
