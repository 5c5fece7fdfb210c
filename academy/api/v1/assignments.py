from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import (
    get_class_student_ids,
    get_teacher_class_ids,
    is_manager,
)
from academy.models.classes import Class, ClassStudent
from academy.models.lms import (
    Assignment,
    AssignmentTarget,
    StudentTask,
    StudentTaskItem,
    TargetScope,
    TaskStatus,
    Workbook,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.lms import (
    AssignmentCreate,
    AssignmentDatesUpdate,
    AssignmentResponse,
    AssignmentWithTasks,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def can_manage_assignment(profile: Profile, assignment: Assignment) -> bool:
    """Principal and managers manage everything, teachers only what they assigned"""
    if is_manager(profile):
        return True
    return assignment.assigned_by == profile.id


def _accessible_class_ids(db: Session, profile: Profile) -> List[uuid.UUID]:
    if is_manager(profile):
        return [row[0] for row in db.query(Class.id).all()]
    return list(get_teacher_class_ids(db, profile.id))


def _resolve_target_scope(class_ids, student_ids) -> TargetScope:
    if class_ids and student_ids:
        return TargetScope.mixed
    if class_ids:
        return TargetScope.class_
    return TargetScope.student


@router.post("", response_model=APIResponse)
def create_assignment(
    assignment_in: AssignmentCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher"])),
):
    """Assign a workbook to classes and/or individual students (Teacher/Principal)"""
    workbook = db.query(Workbook).filter(Workbook.id == assignment_in.workbook_id).first()
    if not workbook:
        return {"success": False, "message": "Workbook not found", "data": None}
    if not workbook.items:
        return {"success": False, "message": "The workbook has no items to assign", "data": None}

    class_ids = list(dict.fromkeys(assignment_in.target_class_ids))
    student_ids = list(dict.fromkeys(assignment_in.target_student_ids))
    accessible = set(_accessible_class_ids(db, current_user))

    if any(class_id not in accessible for class_id in class_ids):
        return {
            "success": False,
            "message": "You can only assign to classes you teach",
            "data": None,
        }

    if student_ids:
        reachable = set()
        if accessible:
            memberships = (
                db.query(ClassStudent.student_id)
                .filter(
                    ClassStudent.student_id.in_(student_ids),
                    ClassStudent.class_id.in_(list(accessible)),
                )
                .all()
            )
            reachable = {row[0] for row in memberships}
        if any(student_id not in reachable for student_id in student_ids):
            return {
                "success": False,
                "message": "Some students do not belong to your classes",
                "data": None,
            }

    recipients = list(dict.fromkeys(get_class_student_ids(db, class_ids) + student_ids))
    if not recipients:
        return {"success": False, "message": "The selected classes have no students", "data": None}

    assignment = Assignment(
        workbook_id=workbook.id,
        assigned_by=current_user.id,
        due_at=assignment_in.due_at,
        published_at=assignment_in.published_at,
        target_scope=_resolve_target_scope(class_ids, student_ids),
    )
    for class_id in class_ids:
        assignment.targets.append(AssignmentTarget(class_id=class_id))
    for student_id in student_ids:
        assignment.targets.append(AssignmentTarget(student_id=student_id))

    for student_id in recipients:
        task = StudentTask(student_id=student_id, status=TaskStatus.pending)
        task.items = [StudentTaskItem(item_id=item.id) for item in workbook.items]
        assignment.tasks.append(task)

    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(
        "[assignments] %s created by %s for %s students",
        assignment.id,
        current_user.id,
        len(recipients),
    )

    return {
        "success": True,
        "message": f"Assignment created for {len(recipients)} students",
        "data": AssignmentResponse.model_validate(assignment),
    }


@router.get("/{assignment_id}", response_model=APIResponse)
def get_assignment(
    assignment_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        return {"success": False, "message": "Assignment not found", "data": None}

    if not can_manage_assignment(current_user, assignment):
        accessible = get_teacher_class_ids(db, current_user.id)
        target_classes = {t.class_id for t in assignment.targets if t.class_id}
        if not target_classes & accessible:
            return {"success": False, "message": "You cannot view this assignment", "data": None}

    return {
        "success": True,
        "message": "Assignment retrieved successfully",
        "data": AssignmentWithTasks.model_validate(assignment),
    }


@router.patch("/{assignment_id}/dates", response_model=APIResponse)
def update_assignment_dates(
    assignment_id: uuid.UUID,
    dates_in: AssignmentDatesUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        return {"success": False, "message": "Assignment not found", "data": None}
    if not can_manage_assignment(current_user, assignment):
        return {"success": False, "message": "You cannot modify this assignment", "data": None}

    changes = dates_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}
    for field, value in changes.items():
        setattr(assignment, field, value)

    db.commit()
    db.refresh(assignment)
    return {
        "success": True,
        "message": "Assignment dates updated",
        "data": AssignmentResponse.model_validate(assignment),
    }
