from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_principal
from academy.core.security import normalize_phone
from academy.models.classes import Class, ClassStudent, ClassTeacher
from academy.models.profiles import Profile, ProfileStatus, UserRole
from academy.schemas.common import APIResponse
from academy.schemas.profiles import (
    ApproveMemberRequest,
    MemberClassesUpdate,
    ProfileResponse,
    ProfileUpdate,
)
from academy.utils.dates import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

manager_only = deps.RoleChecker(["manager"])


def _get_member(db: Session, member_id: uuid.UUID) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.id == member_id).first()


def _replace_student_classes(db: Session, student_id: uuid.UUID, class_ids) -> None:
    db.query(ClassStudent).filter(ClassStudent.student_id == student_id).delete(
        synchronize_session=False
    )
    for class_id in dict.fromkeys(class_ids):
        db.add(ClassStudent(class_id=class_id, student_id=student_id))


def _replace_teacher_classes(db: Session, teacher_id: uuid.UUID, class_ids) -> Optional[str]:
    wanted = set(class_ids)
    homeroom_classes = {
        row[0]
        for row in db.query(Class.id).filter(Class.homeroom_teacher_id == teacher_id).all()
    }
    if homeroom_classes - wanted:
        return "Change the homeroom teacher before removing this teacher from their homeroom class"

    existing = db.query(ClassTeacher).filter(ClassTeacher.teacher_id == teacher_id).all()
    existing_ids = {row.class_id for row in existing}
    for row in existing:
        if row.class_id not in wanted:
            db.delete(row)
    for class_id in dict.fromkeys(class_ids):
        if class_id not in existing_ids:
            db.add(
                ClassTeacher(
                    class_id=class_id,
                    teacher_id=teacher_id,
                    is_homeroom=class_id in homeroom_classes,
                )
            )
    return None


def _missing_classes(db: Session, class_ids) -> bool:
    if not class_ids:
        return False
    found = db.query(Class.id).filter(Class.id.in_(list(set(class_ids)))).count()
    return found != len(set(class_ids))


@router.get("", response_model=APIResponse)
def list_members(
    status: Optional[ProfileStatus] = None,
    role: Optional[UserRole] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """List profiles, optionally filtered by status and role"""
    query = db.query(Profile)
    if status:
        query = query.filter(Profile.status == status)
    if role:
        query = query.filter(Profile.role == role)
    members = query.order_by(Profile.created_at.desc()).all()

    return {
        "success": True,
        "message": "Members retrieved successfully",
        "data": [ProfileResponse.model_validate(m) for m in members],
    }


@router.post("/{member_id}/approve", response_model=APIResponse)
def approve_member(
    member_id: uuid.UUID,
    payload: ApproveMemberRequest = ApproveMemberRequest(),
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Approve a pending sign-up, optionally placing a student in classes"""
    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}

    if member.status != ProfileStatus.pending:
        return {"success": False, "message": "This member has already been processed", "data": None}

    if _missing_classes(db, payload.class_ids):
        return {"success": False, "message": "One or more classes do not exist", "data": None}

    member.status = ProfileStatus.approved
    member.approved_at = utcnow()
    member.approved_by = current_user.id

    if payload.class_ids and member.role == UserRole.student:
        _replace_student_classes(db, member.id, payload.class_ids)

    db.commit()
    db.refresh(member)
    logger.info("[members] %s approved by %s", member.id, current_user.id)

    return {
        "success": True,
        "message": "Member approved successfully",
        "data": ProfileResponse.model_validate(member),
    }


@router.delete("/{member_id}/pending", response_model=APIResponse)
def remove_pending_member(
    member_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Reject a sign-up that has not been approved yet"""
    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}

    if member.status != ProfileStatus.pending:
        return {"success": False, "message": "Only pending members can be removed", "data": None}

    db.delete(member)
    db.commit()
    return {"success": True, "message": "Pending member removed", "data": None}


@router.patch("/{member_id}", response_model=APIResponse)
def update_member(
    member_id: uuid.UUID,
    payload: ProfileUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Update profile details of a member"""
    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}

    changes = payload.model_dump(exclude_unset=True)
    if "role" in changes and changes["role"] != member.role and not is_principal(current_user):
        return {"success": False, "message": "Only the principal can change roles", "data": None}

    for phone_field in ("student_phone", "parent_phone"):
        if phone_field in changes:
            changes[phone_field] = normalize_phone(changes[phone_field]) or None

    for field, value in changes.items():
        setattr(member, field, value)

    db.commit()
    db.refresh(member)
    return {
        "success": True,
        "message": "Member updated successfully",
        "data": ProfileResponse.model_validate(member),
    }


@router.put("/{member_id}/classes", response_model=APIResponse)
def update_member_classes(
    member_id: uuid.UUID,
    payload: MemberClassesUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Replace the class assignments of a student or teacher"""
    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}

    if _missing_classes(db, payload.class_ids):
        return {"success": False, "message": "One or more classes do not exist", "data": None}

    if member.role == UserRole.student:
        _replace_student_classes(db, member.id, payload.class_ids)
    else:
        error = _replace_teacher_classes(db, member.id, payload.class_ids)
        if error:
            db.rollback()
            return {"success": False, "message": error, "data": None}

    db.commit()
    return {
        "success": True,
        "message": "Class assignments updated",
        "data": {"class_ids": [str(cid) for cid in dict.fromkeys(payload.class_ids)]},
    }


@router.post("/{member_id}/withdraw", response_model=APIResponse)
def withdraw_member(
    member_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}
    if member.status != ProfileStatus.approved:
        return {"success": False, "message": "Only approved members can be withdrawn", "data": None}

    member.status = ProfileStatus.withdrawn
    db.commit()
    return {"success": True, "message": "Member withdrawn", "data": None}


@router.post("/{member_id}/reactivate", response_model=APIResponse)
def reactivate_member(
    member_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["principal"])),
):
    """Bring a withdrawn member back (Principal only)"""
    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}
    if member.status != ProfileStatus.withdrawn:
        return {"success": False, "message": "Only withdrawn members can be reactivated", "data": None}

    member.status = ProfileStatus.approved
    member.approved_at = utcnow()
    member.approved_by = current_user.id
    db.commit()
    db.refresh(member)
    return {
        "success": True,
        "message": "Member reactivated",
        "data": ProfileResponse.model_validate(member),
    }


@router.delete("/{member_id}", response_model=APIResponse)
def delete_member(
    member_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Delete an approved or withdrawn member and everything they own"""
    if member_id == current_user.id:
        return {"success": False, "message": "You cannot delete your own account", "data": None}

    member = _get_member(db, member_id)
    if not member:
        return {"success": False, "message": "Member not found", "data": None}
    if member.status == ProfileStatus.pending:
        return {"success": False, "message": "Pending members are removed from the approval queue", "data": None}
    if member.role == UserRole.principal and not is_principal(current_user):
        return {"success": False, "message": "You cannot delete the principal", "data": None}

    db.delete(member)
    db.commit()
    logger.info("[members] %s deleted by %s", member_id, current_user.id)
    return {"success": True, "message": "Member deleted", "data": None}
