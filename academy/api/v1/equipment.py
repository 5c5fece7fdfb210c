from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager, verify_student_in_class
from academy.core.security import sanitize_input
from academy.models.equipment import (
    ACTIVE_RENTAL_STATUSES,
    EquipmentRental,
    EquipmentSlot,
    RentalStatus,
    SlotStatus,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.equipment import (
    RentalCreate,
    RentalPhotoRequest,
    RentalResponse,
    SlotBatchCreate,
    SlotCreate,
    SlotResponse,
    SlotStatusUpdate,
    SlotWithRentals,
)
from academy.utils.dates import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])
student_only = deps.RoleChecker(["student"])


def _active_rental(db: Session, slot_id: uuid.UUID) -> Optional[EquipmentRental]:
    return db.query(EquipmentRental).filter(
        EquipmentRental.slot_id == slot_id,
        EquipmentRental.status.in_(ACTIVE_RENTAL_STATUSES),
    ).first()


def _get_own_rental(db: Session, rental_id: uuid.UUID, current_user: Profile):
    rental = db.query(EquipmentRental).filter(EquipmentRental.id == rental_id).first()
    if not rental:
        return None
    if rental.student_id != current_user.id and not is_manager(current_user):
        return None
    return rental


# ==================== SLOTS ====================


@router.get("/slots", response_model=APIResponse)
def list_slots(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    query = db.query(EquipmentSlot)
    if start:
        query = query.filter(EquipmentSlot.slot_date >= start)
    if end:
        query = query.filter(EquipmentSlot.slot_date <= end)
    slots = query.order_by(EquipmentSlot.slot_date.asc(), EquipmentSlot.set_type.asc()).all()

    if current_user.role.value == "student":
        data = [SlotResponse.model_validate(s) for s in slots]
    else:
        data = [SlotWithRentals.model_validate(s) for s in slots]
    return {"success": True, "message": "Slots retrieved successfully", "data": data}


@router.post("/slots", response_model=APIResponse)
def open_slot(
    slot_in: SlotCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    existing = db.query(EquipmentSlot).filter(
        EquipmentSlot.slot_date == slot_in.slot_date,
        EquipmentSlot.set_type == slot_in.set_type,
    ).first()
    if existing:
        return {"success": False, "message": "A slot already exists for that date and set", "data": None}

    slot = EquipmentSlot(
        slot_date=slot_in.slot_date,
        set_type=slot_in.set_type,
        status=SlotStatus.open,
        notes=sanitize_input(slot_in.notes, 500),
        created_by=current_user.id,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return {"success": True, "message": "Slot opened", "data": SlotResponse.model_validate(slot)}


@router.post("/slots/batch", response_model=APIResponse)
def open_slots_batch(
    batch_in: SlotBatchCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Open every (date, set) combination, skipping the ones that already exist"""
    dates = list(dict.fromkeys(batch_in.dates))
    set_types = list(dict.fromkeys(batch_in.set_types))
    existing = {
        (row.slot_date, row.set_type)
        for row in db.query(EquipmentSlot).filter(EquipmentSlot.slot_date.in_(dates)).all()
    }

    notes = sanitize_input(batch_in.notes, 500)
    created = []
    for slot_date in dates:
        for set_type in set_types:
            if (slot_date, set_type) in existing:
                continue
            slot = EquipmentSlot(
                slot_date=slot_date,
                set_type=set_type,
                status=SlotStatus.open,
                notes=notes,
                created_by=current_user.id,
            )
            db.add(slot)
            created.append(slot)

    db.commit()
    for slot in created:
        db.refresh(slot)

    skipped = len(dates) * len(set_types) - len(created)
    return {
        "success": True,
        "message": f"{len(created)} slots opened, {skipped} skipped",
        "data": {
            "created": [SlotResponse.model_validate(s) for s in created],
            "skipped_count": skipped,
        },
    }


@router.patch("/slots/{slot_id}", response_model=APIResponse)
def update_slot_status(
    slot_id: uuid.UUID,
    status_in: SlotStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    slot = db.query(EquipmentSlot).filter(EquipmentSlot.id == slot_id).first()
    if not slot:
        return {"success": False, "message": "Slot not found", "data": None}
    if status_in.status == SlotStatus.reserved:
        return {"success": False, "message": "Slots are reserved through a rental", "data": None}
    if _active_rental(db, slot.id):
        return {
            "success": False,
            "message": "The slot has an active rental; cancel or return it first",
            "data": None,
        }

    slot.status = status_in.status
    if status_in.notes is not None:
        slot.notes = sanitize_input(status_in.notes, 500)
    db.commit()
    db.refresh(slot)
    return {"success": True, "message": "Slot updated", "data": SlotResponse.model_validate(slot)}


@router.delete("/slots/{slot_id}", response_model=APIResponse)
def delete_slot(
    slot_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    slot = db.query(EquipmentSlot).filter(EquipmentSlot.id == slot_id).first()
    if not slot:
        return {"success": False, "message": "Slot not found", "data": None}
    if _active_rental(db, slot.id):
        return {"success": False, "message": "The slot has an active rental", "data": None}

    db.delete(slot)
    db.commit()
    return {"success": True, "message": "Slot deleted", "data": None}


# ==================== RENTALS ====================


@router.get("/rentals/mine", response_model=APIResponse)
def list_my_rentals(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    rentals = (
        db.query(EquipmentRental)
        .filter(EquipmentRental.student_id == current_user.id)
        .order_by(EquipmentRental.created_at.desc())
        .all()
    )
    return {
        "success": True,
        "message": "Rentals retrieved successfully",
        "data": [RentalResponse.model_validate(r) for r in rentals],
    }


@router.post("/rentals", response_model=APIResponse)
def reserve_slot(
    rental_in: RentalCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    slot = db.query(EquipmentSlot).filter(EquipmentSlot.id == rental_in.slot_id).first()
    if not slot:
        return {"success": False, "message": "Slot not found", "data": None}
    if slot.status != SlotStatus.open or _active_rental(db, slot.id):
        return {"success": False, "message": "This slot is not available", "data": None}
    if not verify_student_in_class(db, current_user.id, rental_in.class_id):
        return {"success": False, "message": "You do not belong to this class", "data": None}

    rental = EquipmentRental(
        slot_id=slot.id,
        student_id=current_user.id,
        class_id=rental_in.class_id,
        memo=sanitize_input(rental_in.memo, 500),
        status=RentalStatus.pending,
    )
    slot.status = SlotStatus.reserved
    db.add(rental)
    db.commit()
    db.refresh(rental)
    logger.info("[equipment] slot %s reserved by %s", slot.id, current_user.id)
    return {"success": True, "message": "Equipment reserved", "data": RentalResponse.model_validate(rental)}


@router.post("/rentals/{rental_id}/checkout", response_model=APIResponse)
def checkout_rental(
    rental_id: uuid.UUID,
    photo_in: RentalPhotoRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    rental = _get_own_rental(db, rental_id, current_user)
    if not rental:
        return {"success": False, "message": "Rental not found", "data": None}
    if rental.status != RentalStatus.pending:
        return {"success": False, "message": "Only reserved equipment can be checked out", "data": None}

    rental.status = RentalStatus.rented
    rental.checkout_photo_path = photo_in.photo_path.strip()
    rental.checked_out_at = utcnow()
    db.commit()
    db.refresh(rental)
    return {"success": True, "message": "Equipment checked out", "data": RentalResponse.model_validate(rental)}


@router.post("/rentals/{rental_id}/return", response_model=APIResponse)
def return_rental(
    rental_id: uuid.UUID,
    photo_in: RentalPhotoRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    rental = _get_own_rental(db, rental_id, current_user)
    if not rental:
        return {"success": False, "message": "Rental not found", "data": None}
    if rental.status != RentalStatus.rented:
        return {"success": False, "message": "Only rented equipment can be returned", "data": None}

    rental.status = RentalStatus.returned
    rental.return_photo_path = photo_in.photo_path.strip()
    rental.returned_at = utcnow()
    if rental.slot.status == SlotStatus.reserved:
        rental.slot.status = SlotStatus.open
    db.commit()
    db.refresh(rental)
    return {"success": True, "message": "Equipment returned", "data": RentalResponse.model_validate(rental)}


@router.post("/rentals/{rental_id}/cancel", response_model=APIResponse)
def cancel_rental(
    rental_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    rental = _get_own_rental(db, rental_id, current_user)
    if not rental:
        return {"success": False, "message": "Rental not found", "data": None}
    if rental.status != RentalStatus.pending:
        return {"success": False, "message": "Only pending reservations can be cancelled", "data": None}

    rental.status = RentalStatus.cancelled
    if rental.slot.status == SlotStatus.reserved:
        rental.slot.status = SlotStatus.open
    db.commit()
    db.refresh(rental)
    return {"success": True, "message": "Reservation cancelled", "data": RentalResponse.model_validate(rental)}
