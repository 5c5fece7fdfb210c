from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.core.security import sanitize_input
from academy.models.counseling import (
    CounselingQuestion,
    CounselingReservation,
    CounselingReservationStatus,
    CounselingSlot,
    CounselingSlotStatus,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.counseling import (
    CounselingQuestionCreate,
    CounselingQuestionMove,
    CounselingQuestionResponse,
    CounselingQuestionUpdate,
    CounselingReservationCreate,
    CounselingReservationMemoUpdate,
    CounselingReservationResponse,
    CounselingReservationStatusUpdate,
    CounselingSlotDuplicate,
    CounselingSlotNotesUpdate,
    CounselingSlotResponse,
    CounselingSlotsCreate,
    CounselingSlotStatusUpdate,
    CounselingSlotWithReservations,
)
from academy.services import counseling as timeline
from academy.utils.dates import resolve_month_range, resolve_month_token, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

manager_only = deps.RoleChecker(["manager"])


def _confirmed_reservation(db: Session, slot_id: uuid.UUID) -> Optional[CounselingReservation]:
    return db.query(CounselingReservation).filter(
        CounselingReservation.slot_id == slot_id,
        CounselingReservation.status == CounselingReservationStatus.confirmed,
    ).first()


def _active_questions(db: Session):
    return (
        db.query(CounselingQuestion)
        .filter(CounselingQuestion.is_active.is_(True))
        .order_by(CounselingQuestion.position.asc())
        .all()
    )


# ==================== PUBLIC ====================


@router.get("/availability", response_model=APIResponse)
def get_availability(
    month: Optional[str] = None,
    db: Session = Depends(deps.get_db),
):
    """Public calendar: open and booked slots plus the reservation form questions"""
    try:
        month_start, month_end = resolve_month_range(month)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    slots = (
        db.query(CounselingSlot)
        .filter(
            CounselingSlot.counseling_date >= month_start,
            CounselingSlot.counseling_date < month_end,
            CounselingSlot.status != CounselingSlotStatus.closed,
        )
        .all()
    )
    cells = timeline.build_calendar_cells(month_start.year, month_start.month)
    return {
        "success": True,
        "message": "Availability retrieved successfully",
        "data": {
            "month": resolve_month_token(month_start),
            "cells": [
                {"date": c.date.isoformat(), "label": c.label, "in_current_month": c.in_current_month}
                for c in cells
            ],
            "slots": timeline.group_slots_by_date(slots),
            "questions": [CounselingQuestionResponse.model_validate(q) for q in _active_questions(db)],
        },
    }


@router.post("/reservations", response_model=APIResponse)
def create_reservation(
    reservation_in: CounselingReservationCreate,
    db: Session = Depends(deps.get_db),
):
    """Public reservation form"""
    slot = db.query(CounselingSlot).filter(CounselingSlot.id == reservation_in.slot_id).first()
    if not slot:
        return {"success": False, "message": "That time is not available", "data": None}
    if slot.status != CounselingSlotStatus.open:
        return {"success": False, "message": "That time is already booked or closed", "data": None}
    if _confirmed_reservation(db, slot.id):
        return {"success": False, "message": "That time is already booked", "data": None}

    answers = reservation_in.additional_answers or {}
    for question in _active_questions(db):
        if question.is_required and not sanitize_input(answers.get(question.field_key)):
            return {"success": False, "message": f"Please answer: {question.prompt}", "data": None}

    reservation = CounselingReservation(
        slot_id=slot.id,
        student_name=reservation_in.student_name,
        contact_phone=reservation_in.contact_phone,
        academic_record=sanitize_input(reservation_in.academic_record, 200),
        target_university=sanitize_input(reservation_in.target_university, 200),
        question=sanitize_input(reservation_in.question, 500),
        additional_answers=answers,
        status=CounselingReservationStatus.confirmed,
    )
    db.add(reservation)
    slot.status = CounselingSlotStatus.booked
    db.commit()
    db.refresh(reservation)

    logger.info(
        "[counseling] reservation %s booked for %s %s",
        reservation.id,
        slot.counseling_date,
        timeline.display_time(slot.start_time),
    )
    return {
        "success": True,
        "message": "Counseling reservation confirmed",
        "data": {
            "id": str(reservation.id),
            "counseling_date": slot.counseling_date.isoformat(),
            "start_time": timeline.display_time(slot.start_time),
        },
    }


# ==================== SLOTS ====================


@router.get("/slots", response_model=APIResponse)
def list_slots(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    query = db.query(CounselingSlot)
    if start:
        query = query.filter(CounselingSlot.counseling_date >= start)
    if end:
        query = query.filter(CounselingSlot.counseling_date <= end)
    slots = query.order_by(
        CounselingSlot.counseling_date.asc(), CounselingSlot.start_time.asc()
    ).all()
    return {
        "success": True,
        "message": "Slots retrieved successfully",
        "data": [CounselingSlotWithReservations.model_validate(s) for s in slots],
    }


@router.post("/slots", response_model=APIResponse)
def create_slots(
    slots_in: CounselingSlotsCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Open slots for a day, skipping times that already exist"""
    start_times = []
    for label in slots_in.times:
        value = timeline.parse_slot_time(label)
        if value not in start_times:
            start_times.append(value)

    existing = {
        row.start_time
        for row in db.query(CounselingSlot)
        .filter(CounselingSlot.counseling_date == slots_in.counseling_date)
        .all()
    }
    notes = sanitize_input(slots_in.notes, 500)
    created = []
    for start_time in start_times:
        if start_time in existing:
            continue
        slot = CounselingSlot(
            counseling_date=slots_in.counseling_date,
            start_time=start_time,
            duration_minutes=timeline.SLOT_INTERVAL_MINUTES,
            status=CounselingSlotStatus.open,
            notes=notes,
            created_by=current_user.id,
            updated_by=current_user.id,
        )
        db.add(slot)
        created.append(slot)

    db.commit()
    for slot in created:
        db.refresh(slot)

    return {
        "success": True,
        "message": f"{len(created)} slots opened, {len(start_times) - len(created)} skipped",
        "data": [CounselingSlotResponse.model_validate(s) for s in created],
    }


@router.patch("/slots/{slot_id}/status", response_model=APIResponse)
def update_slot_status(
    slot_id: uuid.UUID,
    status_in: CounselingSlotStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    slot = db.query(CounselingSlot).filter(CounselingSlot.id == slot_id).first()
    if not slot:
        return {"success": False, "message": "Slot not found", "data": None}

    if _confirmed_reservation(db, slot.id):
        if status_in.status == CounselingSlotStatus.open:
            return {
                "success": False,
                "message": "This time is booked; cancel the reservation before reopening it",
                "data": None,
            }
        if status_in.status == CounselingSlotStatus.closed:
            return {"success": False, "message": "A booked time cannot be closed", "data": None}

    slot.status = status_in.status
    slot.updated_by = current_user.id
    db.commit()
    db.refresh(slot)
    return {"success": True, "message": "Slot updated", "data": CounselingSlotResponse.model_validate(slot)}


@router.patch("/slots/{slot_id}/notes", response_model=APIResponse)
def update_slot_notes(
    slot_id: uuid.UUID,
    notes_in: CounselingSlotNotesUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    slot = db.query(CounselingSlot).filter(CounselingSlot.id == slot_id).first()
    if not slot:
        return {"success": False, "message": "Slot not found", "data": None}

    slot.notes = sanitize_input(notes_in.notes, 500)
    slot.updated_by = current_user.id
    db.commit()
    db.refresh(slot)
    return {"success": True, "message": "Notes saved", "data": CounselingSlotResponse.model_validate(slot)}


@router.post("/slots/{slot_id}/duplicate", response_model=APIResponse)
def duplicate_slot(
    slot_id: uuid.UUID,
    duplicate_in: CounselingSlotDuplicate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    source = db.query(CounselingSlot).filter(CounselingSlot.id == slot_id).first()
    if not source:
        return {"success": False, "message": "Source slot not found", "data": None}

    existing = db.query(CounselingSlot).filter(
        CounselingSlot.counseling_date == duplicate_in.target_date,
        CounselingSlot.start_time == source.start_time,
    ).first()
    if existing:
        return {
            "success": True,
            "message": "A slot already exists at that time",
            "data": CounselingSlotResponse.model_validate(existing),
        }

    slot = CounselingSlot(
        counseling_date=duplicate_in.target_date,
        start_time=source.start_time,
        duration_minutes=source.duration_minutes or timeline.SLOT_INTERVAL_MINUTES,
        status=CounselingSlotStatus.open,
        notes=source.notes,
        created_by=current_user.id,
        updated_by=current_user.id,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return {"success": True, "message": "Slot duplicated", "data": CounselingSlotResponse.model_validate(slot)}


@router.delete("/slots/{slot_id}", response_model=APIResponse)
def delete_slot(
    slot_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    slot = db.query(CounselingSlot).filter(CounselingSlot.id == slot_id).first()
    if not slot:
        return {"success": False, "message": "Slot not found", "data": None}
    if _confirmed_reservation(db, slot.id):
        return {"success": False, "message": "A time with a confirmed reservation cannot be deleted", "data": None}

    db.delete(slot)
    db.commit()
    return {"success": True, "message": "Slot deleted", "data": None}


# ==================== RESERVATIONS ====================


@router.get("/reservations", response_model=APIResponse)
def list_reservations(
    status: Optional[CounselingReservationStatus] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    query = db.query(CounselingReservation).join(
        CounselingSlot, CounselingReservation.slot_id == CounselingSlot.id
    )
    if status:
        query = query.filter(CounselingReservation.status == status)
    reservations = query.order_by(
        CounselingSlot.counseling_date.asc(), CounselingSlot.start_time.asc()
    ).all()

    data = []
    for reservation in reservations:
        data.append(
            {
                "reservation": CounselingReservationResponse.model_validate(reservation),
                "counseling_date": reservation.slot.counseling_date.isoformat(),
                "start_time": timeline.display_time(reservation.slot.start_time),
                "end_time": timeline.display_time(
                    timeline.add_minutes(reservation.slot.start_time, reservation.slot.duration_minutes)
                ),
            }
        )
    return {"success": True, "message": "Reservations retrieved successfully", "data": data}


@router.patch("/reservations/{reservation_id}/status", response_model=APIResponse)
def update_reservation_status(
    reservation_id: uuid.UUID,
    status_in: CounselingReservationStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    reservation = (
        db.query(CounselingReservation)
        .filter(CounselingReservation.id == reservation_id)
        .first()
    )
    if not reservation:
        return {"success": False, "message": "Reservation not found", "data": None}

    slot = reservation.slot
    if status_in.status == CounselingReservationStatus.confirmed:
        other = _confirmed_reservation(db, slot.id)
        if other and other.id != reservation.id:
            return {"success": False, "message": "Another reservation already holds this time", "data": None}

    now = utcnow()
    reservation.status = status_in.status
    reservation.managed_by = current_user.id
    reservation.managed_at = now
    if status_in.status == CounselingReservationStatus.canceled:
        slot.status = CounselingSlotStatus.open
    else:
        slot.status = CounselingSlotStatus.booked
    slot.updated_by = current_user.id

    db.commit()
    db.refresh(reservation)
    logger.info("[counseling] reservation %s -> %s", reservation.id, status_in.status.value)
    return {
        "success": True,
        "message": "Reservation updated",
        "data": CounselingReservationResponse.model_validate(reservation),
    }


@router.patch("/reservations/{reservation_id}/memo", response_model=APIResponse)
def update_reservation_memo(
    reservation_id: uuid.UUID,
    memo_in: CounselingReservationMemoUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    reservation = (
        db.query(CounselingReservation)
        .filter(CounselingReservation.id == reservation_id)
        .first()
    )
    if not reservation:
        return {"success": False, "message": "Reservation not found", "data": None}

    reservation.memo = sanitize_input(memo_in.memo, 1000)
    reservation.managed_by = current_user.id
    reservation.managed_at = utcnow()
    db.commit()
    db.refresh(reservation)
    return {
        "success": True,
        "message": "Memo saved",
        "data": CounselingReservationResponse.model_validate(reservation),
    }


# ==================== QUESTIONS ====================


@router.get("/questions", response_model=APIResponse)
def list_questions(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    questions = db.query(CounselingQuestion).order_by(CounselingQuestion.position.asc()).all()
    return {
        "success": True,
        "message": "Questions retrieved successfully",
        "data": [CounselingQuestionResponse.model_validate(q) for q in questions],
    }


@router.post("/questions", response_model=APIResponse)
def create_question(
    question_in: CounselingQuestionCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    last = db.query(CounselingQuestion).order_by(CounselingQuestion.position.desc()).first()
    question = CounselingQuestion(
        field_key=timeline.generate_question_field_key(),
        prompt=question_in.prompt,
        field_type=question_in.field_type,
        is_required=question_in.is_required,
        position=(last.position if last else 0) + 10,
        created_by=current_user.id,
        updated_by=current_user.id,
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return {"success": True, "message": "Question added", "data": CounselingQuestionResponse.model_validate(question)}


@router.patch("/questions/{question_id}", response_model=APIResponse)
def update_question(
    question_id: uuid.UUID,
    question_in: CounselingQuestionUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    question = db.query(CounselingQuestion).filter(CounselingQuestion.id == question_id).first()
    if not question:
        return {"success": False, "message": "Question not found", "data": None}

    question.prompt = question_in.prompt
    question.field_type = question_in.field_type
    question.is_required = question_in.is_required
    question.is_active = question_in.is_active
    question.updated_by = current_user.id
    db.commit()
    db.refresh(question)
    return {"success": True, "message": "Question updated", "data": CounselingQuestionResponse.model_validate(question)}


@router.delete("/questions/{question_id}", response_model=APIResponse)
def delete_question(
    question_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    question = db.query(CounselingQuestion).filter(CounselingQuestion.id == question_id).first()
    if not question:
        return {"success": False, "message": "Question not found", "data": None}

    db.delete(question)
    db.commit()
    return {"success": True, "message": "Question deleted", "data": None}


@router.post("/questions/{question_id}/move", response_model=APIResponse)
def move_question(
    question_id: uuid.UUID,
    move_in: CounselingQuestionMove,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Swap positions with the neighbouring question"""
    questions = db.query(CounselingQuestion).order_by(CounselingQuestion.position.asc()).all()
    index = next((i for i, q in enumerate(questions) if q.id == question_id), None)
    if index is None:
        return {"success": False, "message": "Question not found", "data": None}

    target_index = index - 1 if move_in.direction == "up" else index + 1
    if target_index < 0 or target_index >= len(questions):
        return {"success": False, "message": "The question cannot move any further", "data": None}

    current, target = questions[index], questions[target_index]
    current.position, target.position = target.position, current.position
    current.updated_by = current_user.id
    target.updated_by = current_user.id
    db.commit()

    ordered = sorted(questions, key=lambda q: q.position)
    return {
        "success": True,
        "message": "Question moved",
        "data": [CounselingQuestionResponse.model_validate(q) for q in ordered],
    }
