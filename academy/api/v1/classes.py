from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import get_teacher_class_ids, is_manager
from academy.models.classes import Class, ClassStudent, ClassTeacher
from academy.models.profiles import Profile, UserRole, STAFF_ROLES
from academy.schemas.classes import ClassCreate, ClassResponse, ClassUpdate
from academy.schemas.common import APIResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def _dedupe(ids: List[uuid.UUID]) -> List[uuid.UUID]:
    return list(dict.fromkeys(ids))


def _validate_members(
    db: Session,
    homeroom_teacher_id: Optional[uuid.UUID],
    teacher_ids: List[uuid.UUID],
    student_ids: List[uuid.UUID],
) -> Optional[str]:
    staff_ids = set(teacher_ids)
    if homeroom_teacher_id:
        staff_ids.add(homeroom_teacher_id)
    if staff_ids:
        staff = db.query(Profile).filter(Profile.id.in_(list(staff_ids))).all()
        if len(staff) != len(staff_ids) or any(p.role.value not in STAFF_ROLES for p in staff):
            return "Teachers must be existing teacher, manager or principal profiles"
    if student_ids:
        students = db.query(Profile).filter(Profile.id.in_(student_ids)).all()
        if len(students) != len(student_ids) or any(p.role != UserRole.student for p in students):
            return "Students must be existing student profiles"
    return None


def _sync_teachers(
    db: Session, class_: Class, homeroom_teacher_id: Optional[uuid.UUID], teacher_ids: List[uuid.UUID]
) -> None:
    """Homeroom teacher is always part of the class teachers, flagged as homeroom."""
    wanted = _dedupe(([homeroom_teacher_id] if homeroom_teacher_id else []) + teacher_ids)
    for row in list(class_.teachers):
        if row.teacher_id not in wanted:
            class_.teachers.remove(row)
    existing = {row.teacher_id: row for row in class_.teachers}
    for teacher_id in wanted:
        row = existing.get(teacher_id)
        if row is None:
            row = ClassTeacher(teacher_id=teacher_id)
            class_.teachers.append(row)
        row.is_homeroom = teacher_id == homeroom_teacher_id


def _sync_students(db: Session, class_: Class, student_ids: List[uuid.UUID]) -> None:
    wanted = _dedupe(student_ids)
    for row in list(class_.students):
        if row.student_id not in wanted:
            class_.students.remove(row)
    existing = {row.student_id for row in class_.students}
    for student_id in wanted:
        if student_id not in existing:
            class_.students.append(ClassStudent(student_id=student_id))


@router.get("", response_model=APIResponse)
def list_classes(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    """List classes (teachers only see the classes they teach)"""
    query = db.query(Class)
    if not is_manager(current_user):
        class_ids = get_teacher_class_ids(db, current_user.id)
        if not class_ids:
            return {"success": True, "message": "Classes retrieved successfully", "data": []}
        query = query.filter(Class.id.in_(list(class_ids)))

    classes = query.order_by(Class.name).all()
    return {
        "success": True,
        "message": "Classes retrieved successfully",
        "data": [ClassResponse.model_validate(c) for c in classes],
    }


@router.post("", response_model=APIResponse)
def create_class(
    class_in: ClassCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["manager"])),
):
    teacher_ids = _dedupe(class_in.teacher_ids)
    student_ids = _dedupe(class_in.student_ids)
    error = _validate_members(db, class_in.homeroom_teacher_id, teacher_ids, student_ids)
    if error:
        return {"success": False, "message": error, "data": None}

    class_ = Class(
        name=class_in.name.strip(),
        description=class_in.description,
        homeroom_teacher_id=class_in.homeroom_teacher_id,
    )
    db.add(class_)
    _sync_teachers(db, class_, class_in.homeroom_teacher_id, teacher_ids)
    _sync_students(db, class_, student_ids)
    db.commit()
    db.refresh(class_)
    logger.info("[classes] %s created by %s", class_.id, current_user.id)

    return {
        "success": True,
        "message": "Class created successfully",
        "data": ClassResponse.model_validate(class_),
    }


@router.patch("/{class_id}", response_model=APIResponse)
def update_class(
    class_id: uuid.UUID,
    class_in: ClassUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["manager"])),
):
    class_ = db.query(Class).filter(Class.id == class_id).first()
    if not class_:
        return {"success": False, "message": "Class not found", "data": None}

    changes = class_in.model_dump(exclude_unset=True)
    homeroom_teacher_id = changes.get("homeroom_teacher_id", class_.homeroom_teacher_id)
    teacher_ids = (
        _dedupe(class_in.teacher_ids)
        if class_in.teacher_ids is not None
        else [row.teacher_id for row in class_.teachers if not row.is_homeroom]
    )
    student_ids = _dedupe(class_in.student_ids) if class_in.student_ids is not None else []

    error = _validate_members(db, homeroom_teacher_id, teacher_ids, student_ids)
    if error:
        return {"success": False, "message": error, "data": None}

    if "name" in changes:
        class_.name = changes["name"].strip()
    if "description" in changes:
        class_.description = changes["description"]
    class_.homeroom_teacher_id = homeroom_teacher_id

    _sync_teachers(db, class_, homeroom_teacher_id, teacher_ids)
    if class_in.student_ids is not None:
        _sync_students(db, class_, student_ids)

    db.commit()
    db.refresh(class_)
    return {
        "success": True,
        "message": "Class updated successfully",
        "data": ClassResponse.model_validate(class_),
    }


@router.delete("/{class_id}", response_model=APIResponse)
def delete_class(
    class_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["manager"])),
):
    class_ = db.query(Class).filter(Class.id == class_id).first()
    if not class_:
        return {"success": False, "message": "Class not found", "data": None}

    db.delete(class_)
    db.commit()
    logger.info("[classes] %s deleted by %s", class_id, current_user.id)
    return {"success": True, "message": "Class deleted successfully", "data": None}
