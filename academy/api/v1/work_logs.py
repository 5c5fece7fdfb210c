from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager
from academy.core.security import sanitize_input
from academy.models.payroll import (
    SubstituteType,
    WorkLogEntry,
    WorkLogReviewStatus,
    WorkLogStatus,
)
from academy.models.profiles import Profile, STAFF_ROLES
from academy.schemas.common import APIResponse
from academy.schemas.work_logs import (
    BulkApproveRequest,
    WorkLogResponse,
    WorkLogReviewRequest,
    WorkLogUpsert,
)
from academy.services.payroll_engine import requires_work_hours
from academy.utils.dates import resolve_month_range, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])
principal_only = deps.RoleChecker(["principal"])

MAX_WORK_HOURS = 24


def _resolve_teacher_id(current_user: Profile, teacher_id: Optional[uuid.UUID]) -> uuid.UUID:
    if teacher_id and is_manager(current_user):
        return teacher_id
    return current_user.id


def _validate_entry(db: Session, teacher_id: uuid.UUID, entry_in: WorkLogUpsert) -> Optional[str]:
    if requires_work_hours(entry_in.status):
        hours = entry_in.work_hours
        if hours is None or hours <= 0 or hours > MAX_WORK_HOURS:
            return "Work hours must be greater than 0 and at most 24"

    if entry_in.status == WorkLogStatus.substitute:
        if not entry_in.substitute_type:
            return "Select whether the substitute is internal or external"
        if entry_in.substitute_type == SubstituteType.internal:
            if not entry_in.substitute_teacher_id:
                return "Select the substitute teacher"
            if entry_in.substitute_teacher_id == teacher_id:
                return "You cannot substitute for yourself"
            substitute = db.query(Profile).filter(Profile.id == entry_in.substitute_teacher_id).first()
            if not substitute or substitute.role.value not in STAFF_ROLES:
                return "Substitute teacher not found"
        elif not sanitize_input(entry_in.external_teacher_name, 100):
            return "Enter the external substitute's name"
    return None


@router.get("", response_model=APIResponse)
def list_work_logs(
    month: Optional[str] = None,
    teacher_id: Optional[uuid.UUID] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Work log entries for one month (defaults to the current month)"""
    try:
        start, end_exclusive = resolve_month_range(month)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    owner_id = _resolve_teacher_id(current_user, teacher_id)
    entries = (
        db.query(WorkLogEntry)
        .filter(
            WorkLogEntry.teacher_id == owner_id,
            WorkLogEntry.work_date >= start,
            WorkLogEntry.work_date < end_exclusive,
        )
        .order_by(WorkLogEntry.work_date.asc())
        .all()
    )

    return {
        "success": True,
        "message": "Work logs retrieved successfully",
        "data": [WorkLogResponse.model_validate(e) for e in entries],
    }


@router.put("", response_model=APIResponse)
def upsert_work_log(
    entry_in: WorkLogUpsert,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Create or replace the entry for one work date"""
    teacher_id = _resolve_teacher_id(current_user, entry_in.teacher_id)
    error = _validate_entry(db, teacher_id, entry_in)
    if error:
        return {"success": False, "message": error, "data": None}

    entry = db.query(WorkLogEntry).filter(
        WorkLogEntry.teacher_id == teacher_id,
        WorkLogEntry.work_date == entry_in.work_date,
    ).first()
    if entry and entry.review_status == WorkLogReviewStatus.approved:
        return {"success": False, "message": "Approved entries cannot be changed", "data": None}
    if entry is None:
        entry = WorkLogEntry(teacher_id=teacher_id, work_date=entry_in.work_date)
        db.add(entry)

    is_substitute = entry_in.status == WorkLogStatus.substitute
    is_external = is_substitute and entry_in.substitute_type == SubstituteType.external

    entry.status = entry_in.status
    entry.work_hours = entry_in.work_hours if requires_work_hours(entry_in.status) else None
    entry.substitute_type = entry_in.substitute_type if is_substitute else None
    entry.substitute_teacher_id = (
        entry_in.substitute_teacher_id
        if is_substitute and entry_in.substitute_type == SubstituteType.internal
        else None
    )
    entry.external_teacher_name = sanitize_input(entry_in.external_teacher_name, 100) if is_external else None
    entry.external_teacher_phone = sanitize_input(entry_in.external_teacher_phone, 30) if is_external else None
    entry.external_teacher_bank = sanitize_input(entry_in.external_teacher_bank, 100) if is_external else None
    entry.external_teacher_account = sanitize_input(entry_in.external_teacher_account, 100) if is_external else None
    entry.external_teacher_hours = entry_in.external_teacher_hours if is_external else None
    entry.notes = sanitize_input(entry_in.notes)

    # every save goes back to the principal for review
    entry.review_status = WorkLogReviewStatus.pending
    entry.review_note = None
    entry.reviewed_by = None
    entry.reviewed_at = None

    db.commit()
    db.refresh(entry)
    return {
        "success": True,
        "message": "Work log saved",
        "data": WorkLogResponse.model_validate(entry),
    }


@router.delete("/{work_date}", response_model=APIResponse)
def delete_work_log(
    work_date: date,
    teacher_id: Optional[uuid.UUID] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    owner_id = _resolve_teacher_id(current_user, teacher_id)
    entry = db.query(WorkLogEntry).filter(
        WorkLogEntry.teacher_id == owner_id,
        WorkLogEntry.work_date == work_date,
    ).first()
    if not entry:
        return {"success": False, "message": "Work log not found", "data": None}
    if entry.review_status == WorkLogReviewStatus.approved:
        return {"success": False, "message": "Approved entries cannot be deleted", "data": None}

    db.delete(entry)
    db.commit()
    return {"success": True, "message": "Work log deleted", "data": None}


@router.post("/bulk-approve", response_model=APIResponse)
def bulk_approve_work_logs(
    request_in: BulkApproveRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    """Approve every pending entry of a month, optionally for one teacher"""
    try:
        start, end_exclusive = resolve_month_range(request_in.month)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    query = db.query(WorkLogEntry).filter(
        WorkLogEntry.review_status == WorkLogReviewStatus.pending,
        WorkLogEntry.work_date >= start,
        WorkLogEntry.work_date < end_exclusive,
    )
    if request_in.teacher_id:
        query = query.filter(WorkLogEntry.teacher_id == request_in.teacher_id)

    now = utcnow()
    entries = query.all()
    for entry in entries:
        entry.review_status = WorkLogReviewStatus.approved
        entry.reviewed_by = current_user.id
        entry.reviewed_at = now

    db.commit()
    logger.info("[work-logs] bulk approved %s entries for %s", len(entries), request_in.month)
    return {
        "success": True,
        "message": f"{len(entries)} entries approved",
        "data": {"approved_count": len(entries)},
    }


@router.post("/{entry_id}/review", response_model=APIResponse)
def review_work_log(
    entry_id: uuid.UUID,
    review_in: WorkLogReviewRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    entry = db.query(WorkLogEntry).filter(WorkLogEntry.id == entry_id).first()
    if not entry:
        return {"success": False, "message": "Work log not found", "data": None}

    note = sanitize_input(review_in.note)
    if review_in.decision == WorkLogReviewStatus.pending:
        return {"success": False, "message": "Choose approve or reject", "data": None}
    if review_in.decision == WorkLogReviewStatus.approved and entry.review_status == WorkLogReviewStatus.approved:
        return {"success": False, "message": "Entry is already approved", "data": None}
    if review_in.decision == WorkLogReviewStatus.rejected and not note:
        return {"success": False, "message": "A note is required when rejecting", "data": None}

    entry.review_status = review_in.decision
    entry.review_note = note
    entry.reviewed_by = current_user.id
    entry.reviewed_at = utcnow()
    db.commit()
    db.refresh(entry)

    return {
        "success": True,
        "message": f"Entry {review_in.decision.value}",
        "data": WorkLogResponse.model_validate(entry),
    }
