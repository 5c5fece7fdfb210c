from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import (
    get_teacher_class_ids,
    is_manager,
    verify_student_in_class,
    verify_teacher_teaches_class,
)
from academy.core.security import sanitize_input
from academy.models.absences import AbsenceReport
from academy.models.classes import Class
from academy.models.profiles import Profile
from academy.schemas.absences import (
    AbsenceReportCreate,
    AbsenceReportResponse,
    AbsenceReportUpdate,
)
from academy.schemas.common import APIResponse

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _serialize(report: AbsenceReport) -> AbsenceReportResponse:
    return AbsenceReportResponse.model_validate(report).model_copy(
        update={
            "class_name": report.class_.name if report.class_ else None,
            "student_name": report.student.display_name if report.student else None,
        }
    )


def _can_edit_report(db: Session, profile: Profile, report: AbsenceReport) -> bool:
    if is_manager(profile):
        return True
    if report.created_by == profile.id:
        return True
    return verify_teacher_teaches_class(db, profile.id, report.class_id)


def _check_action_fields(profile: Profile, fields: dict) -> Optional[str]:
    if fields.get("teacher_action") is not None and profile.role.value != "teacher":
        return "Only teachers can record the teacher action"
    if fields.get("manager_action") is not None and not is_manager(profile):
        return "Only managers can record the manager action"
    return None


@router.get("", response_model=APIResponse)
def list_absences(
    class_id: Optional[uuid.UUID] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """List absence reports (teachers only see their classes)"""
    query = (
        db.query(AbsenceReport)
        .join(Class, AbsenceReport.class_id == Class.id)
        .join(Profile, AbsenceReport.student_id == Profile.id)
    )

    if not is_manager(current_user):
        class_ids = get_teacher_class_ids(db, current_user.id)
        if not class_ids:
            return {"success": True, "message": "Absence reports retrieved successfully", "data": []}
        query = query.filter(AbsenceReport.class_id.in_(list(class_ids)))

    if class_id:
        query = query.filter(AbsenceReport.class_id == class_id)

    reports = query.order_by(
        AbsenceReport.absence_date.desc(), Class.name.asc(), Profile.name.asc()
    ).all()

    return {
        "success": True,
        "message": "Absence reports retrieved successfully",
        "data": [_serialize(r) for r in reports],
    }


@router.post("", response_model=APIResponse)
def create_absence(
    report_in: AbsenceReportCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    if not is_manager(current_user) and not verify_teacher_teaches_class(
        db, current_user.id, report_in.class_id
    ):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    if not verify_student_in_class(db, report_in.student_id, report_in.class_id):
        return {"success": False, "message": "Student does not belong to this class", "data": None}

    fields = {
        "detail_reason": sanitize_input(report_in.detail_reason),
        "teacher_action": sanitize_input(report_in.teacher_action),
        "manager_action": sanitize_input(report_in.manager_action),
    }
    error = _check_action_fields(current_user, fields)
    if error:
        return {"success": False, "message": error, "data": None}

    duplicate = db.query(AbsenceReport).filter(
        AbsenceReport.student_id == report_in.student_id,
        AbsenceReport.absence_date == report_in.absence_date,
    ).first()
    if duplicate:
        return {
            "success": False,
            "message": "An absence is already recorded for this student on that date",
            "data": None,
        }

    report = AbsenceReport(
        class_id=report_in.class_id,
        student_id=report_in.student_id,
        absence_date=report_in.absence_date,
        reason_type=report_in.reason_type,
        created_by=current_user.id,
        **fields,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("[absences] %s recorded for %s", report.id, report.student_id)

    return {"success": True, "message": "Absence recorded", "data": _serialize(report)}


@router.patch("/{report_id}", response_model=APIResponse)
def update_absence(
    report_id: uuid.UUID,
    report_in: AbsenceReportUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    report = db.query(AbsenceReport).filter(AbsenceReport.id == report_id).first()
    if not report:
        return {"success": False, "message": "Absence report not found", "data": None}
    if not _can_edit_report(db, current_user, report):
        return {"success": False, "message": "You cannot modify this report", "data": None}

    changes = report_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}

    for field in ("detail_reason", "teacher_action", "manager_action"):
        if field in changes:
            changes[field] = sanitize_input(changes[field])
    error = _check_action_fields(current_user, changes)
    if error:
        return {"success": False, "message": error, "data": None}

    new_date = changes.get("absence_date")
    if new_date and new_date != report.absence_date:
        duplicate = db.query(AbsenceReport).filter(
            AbsenceReport.student_id == report.student_id,
            AbsenceReport.absence_date == new_date,
            AbsenceReport.id != report.id,
        ).first()
        if duplicate:
            return {
                "success": False,
                "message": "An absence is already recorded for this student on that date",
                "data": None,
            }

    for field, value in changes.items():
        if field in ("absence_date", "reason_type") and value is None:
            continue
        setattr(report, field, value)

    db.commit()
    db.refresh(report)
    return {"success": True, "message": "Absence report updated", "data": _serialize(report)}


@router.delete("/{report_id}", response_model=APIResponse)
def delete_absence(
    report_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    report = db.query(AbsenceReport).filter(AbsenceReport.id == report_id).first()
    if not report:
        return {"success": True, "message": "Absence report already removed", "data": None}
    if not _can_edit_report(db, current_user, report):
        return {"success": False, "message": "You cannot delete this report", "data": None}

    db.delete(report)
    db.commit()
    return {"success": True, "message": "Absence report deleted", "data": None}
