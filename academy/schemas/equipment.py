from typing import List, Optional
from uuid import UUID
from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from academy.models.equipment import EquipmentSetType, RentalStatus, SlotStatus


class SlotCreate(BaseModel):
    slot_date: date
    set_type: EquipmentSetType
    notes: Optional[str] = Field(None, max_length=500)


class SlotBatchCreate(BaseModel):
    dates: List[date] = Field(..., min_length=1)
    set_types: List[EquipmentSetType] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=500)


class SlotStatusUpdate(BaseModel):
    status: SlotStatus
    notes: Optional[str] = Field(None, max_length=500)


class SlotResponse(BaseModel):
    id: UUID
    slot_date: date
    set_type: EquipmentSetType
    status: SlotStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RentalCreate(BaseModel):
    slot_id: UUID
    class_id: UUID
    memo: Optional[str] = Field(None, max_length=500)


class RentalPhotoRequest(BaseModel):
    photo_path: str = Field(..., min_length=1, max_length=500)

    @model_validator(mode="after")
    def check_path(self):
        if not self.photo_path.strip():
            raise ValueError("A photo is required")
        return self


class RentalResponse(BaseModel):
    id: UUID
    slot_id: UUID
    student_id: UUID
    class_id: Optional[UUID] = None
    memo: Optional[str] = None
    status: RentalStatus
    checkout_photo_path: Optional[str] = None
    checked_out_at: Optional[datetime] = None
    return_photo_path: Optional[str] = None
    returned_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SlotWithRentals(SlotResponse):
    rentals: List[RentalResponse] = []
