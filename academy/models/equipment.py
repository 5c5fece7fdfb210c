from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from academy.core.database import Base


class EquipmentSetType(str, enum.Enum):
    set_a = "set_a"
    set_b = "set_b"


class SlotStatus(str, enum.Enum):
    open = "open"
    reserved = "reserved"
    closed = "closed"


class RentalStatus(str, enum.Enum):
    pending = "pending"
    rented = "rented"
    returned = "returned"
    cancelled = "cancelled"


ACTIVE_RENTAL_STATUSES = [RentalStatus.pending, RentalStatus.rented]


class EquipmentSlot(Base):
    __tablename__ = "equipment_slots"
    __table_args__ = (
        UniqueConstraint("slot_date", "set_type", name="uq_equipment_slot_date_set"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slot_date = Column(Date, nullable=False, index=True)
    set_type = Column(Enum(EquipmentSetType), nullable=False)
    status = Column(Enum(SlotStatus), default=SlotStatus.open)
    notes = Column(Text, nullable=True)
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    rentals = relationship(
        "EquipmentRental", back_populates="slot", cascade="all, delete-orphan"
    )


class EquipmentRental(Base):
    __tablename__ = "equipment_rentals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slot_id = Column(
        UUID(as_uuid=True), ForeignKey("equipment_slots.id", ondelete="CASCADE"), nullable=False
    )
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    class_id = Column(
        UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True
    )
    memo = Column(Text, nullable=True)
    status = Column(Enum(RentalStatus), default=RentalStatus.pending)
    checkout_photo_path = Column(String, nullable=True)
    checked_out_at = Column(DateTime(timezone=True), nullable=True)
    return_photo_path = Column(String, nullable=True)
    returned_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    slot = relationship("EquipmentSlot", back_populates="rentals")
    student = relationship("Profile")
