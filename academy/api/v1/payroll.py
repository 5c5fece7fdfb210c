from typing import Optional
from datetime import timedelta
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
import io
import logging
import uuid

from academy.api import deps
from academy.core.security import sanitize_input
from academy.models.payroll import (
    PayrollAckStatus,
    PayrollRunStatus,
    SubstituteType,
    TeacherPayrollProfile,
    TeacherPayrollRun,
    WorkLogEntry,
    WorkLogStatus,
)
from academy.models.profiles import Profile, STAFF_ROLES
from academy.schemas.common import APIResponse
from academy.schemas.payroll import (
    AcknowledgeRequest,
    PayrollProfileArchive,
    PayrollProfileResponse,
    PayrollProfileUpsert,
    PayrollRunRequest,
    PayrollRunResponse,
)
from academy.schemas.work_logs import ExternalPayStatusUpdate, WorkLogResponse
from academy.services import payroll_runs
from academy.services.payroll_pdf import build_payroll_summary_pdf
from academy.utils.dates import resolve_month_range, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

principal_only = deps.RoleChecker(["principal"])


def _serialize_run(run: TeacherPayrollRun) -> PayrollRunResponse:
    return PayrollRunResponse.model_validate(run).model_copy(
        update={"message_preview": payroll_runs.display_message(run)}
    )


# ==================== PAYROLL PROFILES ====================


@router.get("/profiles", response_model=APIResponse)
def list_payroll_profiles(
    teacher_id: Optional[uuid.UUID] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    query = db.query(TeacherPayrollProfile)
    if teacher_id:
        query = query.filter(TeacherPayrollProfile.teacher_id == teacher_id)
    profiles = query.order_by(TeacherPayrollProfile.effective_from.desc()).all()
    return {
        "success": True,
        "message": "Payroll profiles retrieved successfully",
        "data": [PayrollProfileResponse.model_validate(p) for p in profiles],
    }


@router.put("/profiles", response_model=APIResponse)
def upsert_payroll_profile(
    profile_in: PayrollProfileUpsert,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    """Create or update the open-ended (active) payroll profile of a teacher"""
    teacher = db.query(Profile).filter(Profile.id == profile_in.teacher_id).first()
    if not teacher or teacher.role.value not in STAFF_ROLES:
        return {"success": False, "message": "Teacher not found", "data": None}

    profile = (
        db.query(TeacherPayrollProfile)
        .filter(
            TeacherPayrollProfile.teacher_id == teacher.id,
            TeacherPayrollProfile.effective_to.is_(None),
        )
        .order_by(TeacherPayrollProfile.effective_from.desc())
        .first()
    )
    if profile is None:
        profile = TeacherPayrollProfile(teacher_id=teacher.id, created_by=current_user.id)
        db.add(profile)

    profile.hourly_rate = profile_in.hourly_rate
    profile.base_salary_amount = profile_in.base_salary_amount
    profile.contract_type = profile_in.contract_type
    profile.insurance_enrolled = profile_in.insurance_enrolled
    profile.effective_from = profile_in.effective_from
    profile.notes = sanitize_input(profile_in.notes)

    db.commit()
    db.refresh(profile)
    return {
        "success": True,
        "message": "Payroll profile saved",
        "data": PayrollProfileResponse.model_validate(profile),
    }


@router.post("/profiles/{profile_id}/archive", response_model=APIResponse)
def archive_payroll_profile(
    profile_id: uuid.UUID,
    archive_in: PayrollProfileArchive,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    profile = db.query(TeacherPayrollProfile).filter(TeacherPayrollProfile.id == profile_id).first()
    if not profile:
        return {"success": False, "message": "Payroll profile not found", "data": None}
    if profile.effective_to is not None:
        return {"success": False, "message": "Payroll profile is already archived", "data": None}

    effective_to = archive_in.effective_to or utcnow().date()
    if effective_to < profile.effective_from:
        return {"success": False, "message": "End date cannot be before the start date", "data": None}

    profile.effective_to = effective_to
    db.commit()
    db.refresh(profile)
    return {
        "success": True,
        "message": "Payroll profile archived",
        "data": PayrollProfileResponse.model_validate(profile),
    }


# ==================== PAYROLL RUNS ====================


@router.post("/preview", response_model=APIResponse)
def preview_payroll(
    request_in: PayrollRunRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    """Calculate a month's pay without saving anything"""
    prepared = payroll_runs.prepare_payroll(db, request_in)
    return {
        "success": True,
        "message": "Payroll calculated",
        "data": {
            "teacher_id": prepared.teacher.id,
            "period_start": prepared.period_start,
            "period_end": prepared.period_end,
            "contract_type": prepared.profile.contract_type.value,
            "breakdown": prepared.breakdown.to_dict(),
            "message": prepared.message,
        },
    }


@router.post("/draft", response_model=APIResponse)
def save_payroll_draft(
    request_in: PayrollRunRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    prepared = payroll_runs.prepare_payroll(db, request_in)
    run = payroll_runs.save_run(db, prepared, current_user, request_ack=False)
    return {"success": True, "message": "Payroll draft saved", "data": _serialize_run(run)}


@router.post("/request", response_model=APIResponse)
def request_payroll_confirmation(
    request_in: PayrollRunRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    """Save the run and ask the teacher to confirm the statement"""
    prepared = payroll_runs.prepare_payroll(db, request_in)
    run = payroll_runs.save_run(
        db,
        prepared,
        current_user,
        request_ack=True,
        request_note=sanitize_input(request_in.request_note),
    )
    return {
        "success": True,
        "message": "Confirmation requested from the teacher",
        "data": _serialize_run(run),
    }


@router.get("/runs", response_model=APIResponse)
def list_payroll_runs(
    month: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    try:
        period_start, _ = resolve_month_range(month)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    runs = (
        db.query(TeacherPayrollRun)
        .filter(TeacherPayrollRun.period_start == period_start)
        .order_by(TeacherPayrollRun.created_at.asc())
        .all()
    )
    return {
        "success": True,
        "message": "Payroll runs retrieved successfully",
        "data": [_serialize_run(r) for r in runs],
    }


@router.get("/runs/export")
def export_payroll_runs_pdf(
    month: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    """Download the month's payroll runs as a PDF summary"""
    try:
        period_start, _ = resolve_month_range(month)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    runs = (
        db.query(TeacherPayrollRun)
        .filter(TeacherPayrollRun.period_start == period_start)
        .order_by(TeacherPayrollRun.created_at.asc())
        .all()
    )
    if not runs:
        return {"success": False, "message": "No payroll runs for this month", "data": None}

    month_label = period_start.strftime("%Y-%m")
    content = build_payroll_summary_pdf(month_label, runs)
    logger.info("[payroll] exported %d runs for %s", len(runs), month_label)
    filename = f"payroll-{month_label}.pdf"
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return StreamingResponse(io.BytesIO(content), media_type="application/pdf", headers=headers)


@router.get("/runs/mine", response_model=APIResponse)
def list_my_payroll_runs(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    """Statements sent to the current teacher (drafts stay hidden)"""
    runs = (
        db.query(TeacherPayrollRun)
        .filter(
            TeacherPayrollRun.teacher_id == current_user.id,
            TeacherPayrollRun.status != PayrollRunStatus.draft,
        )
        .order_by(TeacherPayrollRun.period_start.desc())
        .all()
    )
    return {
        "success": True,
        "message": "Payroll runs retrieved successfully",
        "data": [_serialize_run(r) for r in runs],
    }


@router.post("/runs/{run_id}/acknowledge", response_model=APIResponse)
def acknowledge_payroll_run(
    run_id: uuid.UUID,
    ack_in: AcknowledgeRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    run = db.query(TeacherPayrollRun).filter(TeacherPayrollRun.id == run_id).first()
    if not run or run.teacher_id != current_user.id:
        return {"success": False, "message": "Payroll run not found", "data": None}
    if run.status != PayrollRunStatus.pending_ack or run.acknowledgement is None:
        return {"success": False, "message": "This statement is not awaiting confirmation", "data": None}

    now = utcnow()
    ack = run.acknowledgement
    ack.status = PayrollAckStatus.confirmed
    ack.confirmed_at = now
    ack.updated_by = current_user.id
    note = sanitize_input(ack_in.note)
    if note:
        ack.note = note
    run.status = PayrollRunStatus.confirmed

    db.commit()
    db.refresh(run)
    logger.info("[payroll] run %s confirmed by %s", run.id, current_user.id)
    return {"success": True, "message": "Payroll statement confirmed", "data": _serialize_run(run)}


@router.post("/runs/{run_id}/complete", response_model=APIResponse)
def complete_payroll_run(
    run_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    """Mark a confirmed statement as paid"""
    run = db.query(TeacherPayrollRun).filter(TeacherPayrollRun.id == run_id).first()
    if not run:
        return {"success": False, "message": "Payroll run not found", "data": None}
    if run.status == PayrollRunStatus.paid:
        return {"success": False, "message": "This payroll has already been paid", "data": None}

    ack_confirmed = (
        run.acknowledgement is not None
        and run.acknowledgement.status == PayrollAckStatus.confirmed
    )
    if run.status != PayrollRunStatus.confirmed and not ack_confirmed:
        return {
            "success": False,
            "message": "The teacher has not confirmed this statement yet",
            "data": None,
        }

    run.status = PayrollRunStatus.paid
    run.paid_at = utcnow()
    run.paid_by = current_user.id
    db.commit()
    db.refresh(run)
    logger.info("[payroll] run %s marked paid by %s", run.id, current_user.id)
    return {"success": True, "message": "Payment completed", "data": _serialize_run(run)}


# ==================== EXTERNAL SUBSTITUTES ====================


@router.get("/external-substitutes", response_model=APIResponse)
def list_external_substitutes(
    month: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    try:
        start, end_exclusive = resolve_month_range(month)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    entries = (
        db.query(WorkLogEntry)
        .filter(
            WorkLogEntry.status == WorkLogStatus.substitute,
            WorkLogEntry.substitute_type == SubstituteType.external,
            WorkLogEntry.work_date >= start,
            WorkLogEntry.work_date < end_exclusive,
        )
        .order_by(WorkLogEntry.work_date.asc())
        .all()
    )

    total_hours = sum(e.external_teacher_hours or 0 for e in entries)
    absent_teacher_ids = {e.teacher_id for e in entries if e.teacher_id}
    return {
        "success": True,
        "message": "External substitutes retrieved successfully",
        "data": {
            "period_start": start,
            "period_end": end_exclusive - timedelta(days=1),
            "entries": [
                {
                    "entry": WorkLogResponse.model_validate(e),
                    "teacher_name": e.teacher.display_name if e.teacher else None,
                }
                for e in entries
            ],
            "summary": {
                "total_hours": round(total_hours, 2),
                "teacher_count": len(absent_teacher_ids),
                "entry_count": len(entries),
            },
        },
    }


@router.patch("/external-substitutes/{entry_id}", response_model=APIResponse)
def update_external_pay_status(
    entry_id: uuid.UUID,
    status_in: ExternalPayStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    entry = db.query(WorkLogEntry).filter(WorkLogEntry.id == entry_id).first()
    if not entry or entry.substitute_type != SubstituteType.external:
        return {"success": False, "message": "External substitute entry not found", "data": None}

    entry.external_teacher_pay_status = status_in.status
    db.commit()
    db.refresh(entry)
    return {
        "success": True,
        "message": "Payment status updated",
        "data": WorkLogResponse.model_validate(entry),
    }
