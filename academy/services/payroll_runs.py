"""Persisting payroll calculations as runs, items and acknowledgements."""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional
import logging
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from academy.core.exceptions import NotFound, ValidationError
from academy.models.payroll import (
    PayrollAckStatus,
    PayrollItemKind,
    PayrollRunStatus,
    TeacherPayrollAcknowledgement,
    TeacherPayrollProfile,
    TeacherPayrollRun,
    TeacherPayrollRunItem,
    WorkLogEntry,
    WorkLogReviewStatus,
)
from academy.models.profiles import Profile, STAFF_ROLES
from academy.schemas.payroll import PayrollRunRequest
from academy.services.payroll_engine import (
    PayrollAdjustment,
    PayrollBreakdown,
    PayrollCalculationInput,
    calculate_payroll,
    round2,
)
from academy.services.payroll_messages import (
    ALLOWANCE_LABEL,
    build_payroll_message,
    create_message_context,
    sanitize_payroll_message,
)
from academy.utils.dates import resolve_month_range, utcnow

logger = logging.getLogger(__name__)


@dataclass
class PreparedPayroll:
    teacher: Profile
    profile: TeacherPayrollProfile
    period_start: date
    period_end: date
    breakdown: PayrollBreakdown
    message: str


def find_active_profile(
    db: Session, teacher_id: uuid.UUID, period_start: date, period_end: date
) -> Optional[TeacherPayrollProfile]:
    """Latest profile whose effective window overlaps the period."""
    return (
        db.query(TeacherPayrollProfile)
        .filter(
            TeacherPayrollProfile.teacher_id == teacher_id,
            TeacherPayrollProfile.effective_from <= period_end,
            or_(
                TeacherPayrollProfile.effective_to.is_(None),
                TeacherPayrollProfile.effective_to >= period_start,
            ),
        )
        .order_by(TeacherPayrollProfile.effective_from.desc())
        .first()
    )


def _collect_adjustments(request_in: PayrollRunRequest) -> List[PayrollAdjustment]:
    adjustments = [
        PayrollAdjustment(label=item.label.strip(), amount=item.amount, is_deduction=item.is_deduction)
        for item in request_in.adjustments
    ]
    adjustments.extend(
        PayrollAdjustment(label=item.label.strip(), amount=item.amount)
        for item in request_in.incentives
    )
    return adjustments


def prepare_payroll(db: Session, request_in: PayrollRunRequest) -> PreparedPayroll:
    teacher = db.query(Profile).filter(Profile.id == request_in.teacher_id).first()
    if not teacher or teacher.role.value not in STAFF_ROLES:
        raise NotFound("Teacher not found")

    try:
        period_start, end_exclusive = resolve_month_range(request_in.month)
    except ValueError as e:
        raise ValidationError(str(e))
    period_end = end_exclusive - timedelta(days=1)

    profile = find_active_profile(db, teacher.id, period_start, period_end)
    if not profile:
        raise ValidationError("No payroll profile is active for this teacher in that month")

    # only approved entries are paid
    work_logs = (
        db.query(WorkLogEntry)
        .filter(
            WorkLogEntry.teacher_id == teacher.id,
            WorkLogEntry.review_status == WorkLogReviewStatus.approved,
            WorkLogEntry.work_date >= period_start,
            WorkLogEntry.work_date <= period_end,
        )
        .order_by(WorkLogEntry.work_date.asc())
        .all()
    )

    contract_type = profile.contract_type.value
    breakdown = calculate_payroll(
        PayrollCalculationInput(
            period_start=period_start,
            period_end=period_end,
            hourly_rate=profile.hourly_rate,
            contract_type=contract_type,
            work_logs=work_logs,
            base_salary_amount=profile.base_salary_amount,
            insurance_enrolled=bool(profile.insurance_enrolled),
            adjustments=_collect_adjustments(request_in),
            teacher_id=teacher.id,
            teacher_name=teacher.display_name,
        )
    )

    message = build_payroll_message(
        create_message_context(teacher.display_name, request_in.month, contract_type, breakdown)
    )
    extra = (request_in.message_append or "").strip()
    if extra:
        message = f"{message}\n\n{extra}"

    return PreparedPayroll(
        teacher=teacher,
        profile=profile,
        period_start=period_start,
        period_end=period_end,
        breakdown=breakdown,
        message=message,
    )


def _build_items(breakdown: PayrollBreakdown) -> List[TeacherPayrollRunItem]:
    rows = [
        (PayrollItemKind.earning, "Hourly pay", breakdown.hourly_total, {"hours": breakdown.total_work_hours}),
    ]
    if breakdown.weekly_holiday_allowance > 0:
        rows.append((
            PayrollItemKind.earning,
            ALLOWANCE_LABEL,
            breakdown.weekly_holiday_allowance,
            {"hours": breakdown.weekly_holiday_allowance_hours},
        ))
    if breakdown.base_salary_total > 0:
        rows.append((PayrollItemKind.earning, "Base salary", breakdown.base_salary_total, {}))
    for addition in breakdown.additions:
        rows.append((PayrollItemKind.earning, addition.label, addition.amount, {"adjustment": True}))
    for deduction in breakdown.deduction_details:
        rows.append((PayrollItemKind.deduction, deduction.label, deduction.amount, {}))
    rows.append((
        PayrollItemKind.info,
        "Work summary",
        breakdown.total_work_hours,
        {
            "total_work_hours": breakdown.total_work_hours,
            "weekly_summaries": [summary.to_dict() for summary in breakdown.weekly_summaries],
        },
    ))

    return [
        TeacherPayrollRunItem(
            item_kind=kind, label=label, amount=amount, item_metadata=metadata, order_index=index
        )
        for index, (kind, label, amount, metadata) in enumerate(rows)
    ]


def save_run(
    db: Session,
    prepared: PreparedPayroll,
    actor: Profile,
    request_ack: bool,
    request_note: Optional[str] = None,
) -> TeacherPayrollRun:
    """Upsert the run for (teacher, period_start) and rebuild its items."""
    run = db.query(TeacherPayrollRun).filter(
        TeacherPayrollRun.teacher_id == prepared.teacher.id,
        TeacherPayrollRun.period_start == prepared.period_start,
    ).first()
    if run and run.status == PayrollRunStatus.paid:
        raise ValidationError("This payroll has already been paid")

    if run is None:
        run = TeacherPayrollRun(
            teacher_id=prepared.teacher.id,
            period_start=prepared.period_start,
            created_by=actor.id,
        )
        db.add(run)

    breakdown = prepared.breakdown
    run.payroll_profile_id = prepared.profile.id
    run.period_end = prepared.period_end
    run.contract_type = prepared.profile.contract_type
    run.insurance_enrolled = bool(prepared.profile.insurance_enrolled)
    run.hourly_total = breakdown.hourly_total
    run.weekly_holiday_allowance = breakdown.weekly_holiday_allowance
    run.base_salary_total = breakdown.base_salary_total
    run.adjustment_total = round2(
        sum(item.amount for item in breakdown.adjustments if not item.is_deduction)
    )
    run.gross_pay = breakdown.gross_pay
    run.deductions_total = breakdown.deductions_total
    run.net_pay = breakdown.net_pay
    run.message_preview = prepared.message
    run.meta = {
        "total_work_hours": breakdown.total_work_hours,
        "weekly_holiday_allowance_hours": breakdown.weekly_holiday_allowance_hours,
        "adjustments": [item.to_dict() for item in breakdown.adjustments],
        "request_note": request_note,
    }

    run.items.clear()
    db.flush()
    run.items.extend(_build_items(breakdown))

    now = utcnow()
    if request_ack:
        run.status = PayrollRunStatus.pending_ack
        run.requested_by = actor.id
        run.requested_at = now
        ack = run.acknowledgement
        if ack is None:
            ack = TeacherPayrollAcknowledgement(teacher_id=prepared.teacher.id)
            run.acknowledgement = ack
        ack.status = PayrollAckStatus.pending
        ack.requested_at = now
        ack.confirmed_at = None
        ack.note = request_note
        ack.updated_by = actor.id
    else:
        run.status = PayrollRunStatus.draft

    db.commit()
    db.refresh(run)
    logger.info(
        "[payroll] run %s for %s saved as %s (net %s)",
        run.id,
        prepared.teacher.id,
        run.status.value,
        run.net_pay,
    )
    return run


def display_message(run: TeacherPayrollRun) -> Optional[str]:
    return sanitize_payroll_message(
        run.message_preview,
        run.contract_type.value,
        net_pay=run.net_pay,
        weekly_holiday_allowance=run.weekly_holiday_allowance,
    )
