from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.core.security import normalize_phone
from academy.models.classes import ClassStudent
from academy.models.enrollment import EnrollmentApplication, EnrollmentStatus
from academy.models.profiles import Profile, UserRole
from academy.schemas.common import APIResponse
from academy.schemas.enrollment import (
    EnrollmentApplicationCreate,
    EnrollmentApplicationResponse,
)
from academy.utils.dates import utcnow
from academy.utils.email import send_enrollment_received_email

logger = logging.getLogger(__name__)
router = APIRouter()


def _student_phone_index(db: Session) -> dict:
    """Map every known student/parent phone to its student profile."""
    index = {}
    students = db.query(Profile).filter(Profile.role == UserRole.student).all()
    for student in students:
        for phone in (student.student_phone, student.parent_phone):
            digits = normalize_phone(phone)
            if digits and digits not in index:
                index[digits] = student
    return index


@router.post("/applications", response_model=APIResponse)
def submit_application(
    application_in: EnrollmentApplicationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
):
    """Public enrollment form"""
    application = EnrollmentApplication(
        student_name=application_in.student_name,
        parent_phone=application_in.parent_phone,
        parent_email=application_in.parent_email,
        student_phone=application_in.student_phone,
        desired_class=application_in.desired_class,
        saturday_briefing_received=application_in.saturday_briefing_received,
        schedule_fee_confirmed=application_in.schedule_fee_confirmed,
        status=EnrollmentStatus.pending,
    )
    db.add(application)
    db.commit()
    db.refresh(application)

    if application.parent_email:
        background_tasks.add_task(
            send_enrollment_received_email,
            application.parent_email,
            application.student_name,
            application.desired_class.value,
        )

    return {
        "success": True,
        "message": "Enrollment application submitted",
        "data": {"id": str(application.id)},
    }


@router.get("/applications", response_model=APIResponse)
def list_applications(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["manager"])),
):
    applications = (
        db.query(EnrollmentApplication)
        .order_by(EnrollmentApplication.created_at.desc())
        .all()
    )
    return {
        "success": True,
        "message": "Applications retrieved successfully",
        "data": [EnrollmentApplicationResponse.model_validate(a) for a in applications],
    }


@router.delete("/applications/{application_id}", response_model=APIResponse)
def delete_application(
    application_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["manager"])),
):
    application = (
        db.query(EnrollmentApplication)
        .filter(EnrollmentApplication.id == application_id)
        .first()
    )
    if not application:
        return {"success": False, "message": "Application not found", "data": None}

    db.delete(application)
    db.commit()
    return {"success": True, "message": "Application deleted", "data": None}


@router.post("/applications/sync", response_model=APIResponse)
def sync_application_statuses(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["manager"])),
):
    """Match applications to student profiles by phone number"""
    phone_index = _student_phone_index(db)
    applications = (
        db.query(EnrollmentApplication)
        .filter(EnrollmentApplication.status != EnrollmentStatus.assigned)
        .all()
    )

    confirmed = 0
    assigned = 0
    for application in applications:
        student = None
        for phone in (application.student_phone, application.parent_phone):
            digits = normalize_phone(phone)
            if digits and digits in phone_index:
                student = phone_index[digits]
                break
        if student is None:
            continue

        membership = (
            db.query(ClassStudent)
            .filter(ClassStudent.student_id == student.id)
            .order_by(ClassStudent.created_at)
            .first()
        )
        application.matched_profile_id = student.id
        application.status_updated_at = utcnow()
        if membership:
            application.status = EnrollmentStatus.assigned
            application.assigned_class_id = membership.class_id
            assigned += 1
        else:
            application.status = EnrollmentStatus.confirmed
            confirmed += 1

    db.commit()
    logger.info("[enrollment] sync matched %s confirmed, %s assigned", confirmed, assigned)
    return {
        "success": True,
        "message": "Application statuses synchronized",
        "data": {"confirmed": confirmed, "assigned": assigned},
    }
