from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    Integer,
    JSON,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from academy.core.database import Base


class ClassMaterialSubject(str, enum.Enum):
    directing = "directing"
    screenwriting = "screenwriting"
    film_research = "film_research"


class ClassMaterialAssetType(str, enum.Enum):
    class_material = "class_material"
    student_handout = "student_handout"


class PrintColorMode(str, enum.Enum):
    bw = "bw"
    color = "color"


class PrintRequestStatus(str, enum.Enum):
    requested = "requested"
    in_progress = "in_progress"
    completed = "completed"
    canceled = "canceled"


class AdmissionMaterialCategory(str, enum.Enum):
    guideline = "guideline"
    past_exam = "past_exam"
    success_review = "success_review"


# ==================== CLASS MATERIALS ====================


class ClassMaterialPost(Base):
    __tablename__ = "class_material_posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject = Column(Enum(ClassMaterialSubject), nullable=False, index=True)
    week_label = Column(String, nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    # storage object paths, uploaded by the client
    class_material_path = Column(String, nullable=True)
    class_material_name = Column(String, nullable=True)
    student_handout_path = Column(String, nullable=True)
    student_handout_name = Column(String, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    author = relationship("Profile")
    print_requests = relationship(
        "ClassMaterialPrintRequest", back_populates="post", cascade="all, delete-orphan"
    )

    def asset(self, asset_type: ClassMaterialAssetType):
        """(path, file name) for one of the two attachments"""
        if asset_type == ClassMaterialAssetType.class_material:
            return self.class_material_path, self.class_material_name
        return self.student_handout_path, self.student_handout_name


class ClassMaterialPrintRequest(Base):
    __tablename__ = "class_material_print_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(
        UUID(as_uuid=True), ForeignKey("class_material_posts.id", ondelete="CASCADE"), nullable=False
    )
    requested_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    copies = Column(Integer, default=1)
    color_mode = Column(Enum(PrintColorMode), default=PrintColorMode.bw)
    desired_date = Column(Date, nullable=True)
    desired_period = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(Enum(PrintRequestStatus), default=PrintRequestStatus.requested)
    handled_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    post = relationship("ClassMaterialPost", back_populates="print_requests")
    requester = relationship("Profile", foreign_keys=[requested_by])
    items = relationship(
        "ClassMaterialPrintRequestItem", back_populates="request", cascade="all, delete-orphan"
    )


class ClassMaterialPrintRequestItem(Base):
    __tablename__ = "class_material_print_request_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id = Column(
        UUID(as_uuid=True),
        ForeignKey("class_material_print_requests.id", ondelete="CASCADE"),
        nullable=False,
    )
    asset_type = Column(Enum(ClassMaterialAssetType), nullable=False)
    asset_path = Column(String, nullable=False)
    asset_filename = Column(String, nullable=True)

    request = relationship("ClassMaterialPrintRequest", back_populates="items")


# ==================== ADMISSION MATERIALS ====================


class AdmissionMaterialPost(Base):
    __tablename__ = "admission_material_posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category = Column(Enum(AdmissionMaterialCategory), nullable=False, index=True)
    target_level = Column(String, nullable=True)  # university name for guidelines
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    past_exam_year = Column(Integer, nullable=True)
    past_exam_university = Column(String, nullable=True)
    past_exam_admission_types = Column(JSON, nullable=True)  # ["early", "regular"]
    guide_path = Column(String, nullable=True)
    guide_name = Column(String, nullable=True)
    resource_path = Column(String, nullable=True)
    resource_name = Column(String, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    author = relationship("Profile")
    schedules = relationship(
        "AdmissionMaterialSchedule",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="AdmissionMaterialSchedule.start_at",
    )


class AdmissionMaterialSchedule(Base):
    __tablename__ = "admission_material_schedules"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(
        UUID(as_uuid=True), ForeignKey("admission_material_posts.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String, nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False, index=True)
    end_at = Column(DateTime(timezone=True), nullable=True)
    location = Column(String, nullable=True)
    memo = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    post = relationship("AdmissionMaterialPost", back_populates="schedules")
