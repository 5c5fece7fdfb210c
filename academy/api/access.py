"""Membership lookups shared by the routers."""
from typing import List, Set
from sqlalchemy.orm import Session
import uuid

from academy.models.classes import ClassStudent, ClassTeacher
from academy.models.profiles import Profile, MANAGER_ROLES


def is_manager(profile: Profile) -> bool:
    return profile.role.value in MANAGER_ROLES


def is_principal(profile: Profile) -> bool:
    return profile.role.value == "principal"


def get_teacher_class_ids(db: Session, teacher_id: uuid.UUID) -> Set[uuid.UUID]:
    """Get all class ids a teacher is assigned to"""
    rows = db.query(ClassTeacher.class_id).filter(ClassTeacher.teacher_id == teacher_id).all()
    return {row[0] for row in rows}


def get_student_class_ids(db: Session, student_id: uuid.UUID) -> Set[uuid.UUID]:
    rows = db.query(ClassStudent.class_id).filter(ClassStudent.student_id == student_id).all()
    return {row[0] for row in rows}


def verify_teacher_teaches_class(db: Session, teacher_id: uuid.UUID, class_id: uuid.UUID) -> bool:
    mapping = db.query(ClassTeacher).filter(
        ClassTeacher.teacher_id == teacher_id,
        ClassTeacher.class_id == class_id,
    ).first()
    return mapping is not None


def verify_student_in_class(db: Session, student_id: uuid.UUID, class_id: uuid.UUID) -> bool:
    membership = db.query(ClassStudent).filter(
        ClassStudent.student_id == student_id,
        ClassStudent.class_id == class_id,
    ).first()
    return membership is not None


def get_class_student_ids(db: Session, class_ids: List[uuid.UUID]) -> List[uuid.UUID]:
    if not class_ids:
        return []
    rows = (
        db.query(ClassStudent.student_id)
        .filter(ClassStudent.class_id.in_(class_ids))
        .all()
    )
    seen = []
    for row in rows:
        if row[0] not in seen:
            seen.append(row[0])
    return seen


def can_access_class(db: Session, profile: Profile, class_id: uuid.UUID) -> bool:
    if is_manager(profile):
        return True
    return verify_teacher_teaches_class(db, profile.id, class_id)
