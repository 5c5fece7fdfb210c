from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.core.security import sanitize_input
from academy.models.lectures import Lecture
from academy.models.profiles import Profile, STAFF_ROLES
from academy.schemas.common import APIResponse
from academy.schemas.lectures import LectureCreate, LectureResponse, LectureUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _is_staff(current_user: Profile) -> bool:
    return current_user.role.value in STAFF_ROLES


@router.get("", response_model=APIResponse)
def list_lectures(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    """Students only see published lectures"""
    query = db.query(Lecture)
    if not _is_staff(current_user):
        query = query.filter(Lecture.is_published.is_(True))
    lectures = query.order_by(Lecture.created_at.desc()).all()
    return {
        "success": True,
        "message": "Lectures retrieved successfully",
        "data": [LectureResponse.model_validate(lecture) for lecture in lectures],
    }


@router.get("/{lecture_id}", response_model=APIResponse)
def get_lecture(
    lecture_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    lecture = db.query(Lecture).filter(Lecture.id == lecture_id).first()
    if not lecture or (not lecture.is_published and not _is_staff(current_user)):
        return {"success": False, "message": "Lecture not found", "data": None}
    return {
        "success": True,
        "message": "Lecture retrieved successfully",
        "data": LectureResponse.model_validate(lecture),
    }


@router.post("", response_model=APIResponse)
def create_lecture(
    lecture_in: LectureCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    lecture = Lecture(
        title=lecture_in.title,
        description=sanitize_input(lecture_in.description, 5000),
        youtube_url=lecture_in.youtube_url,
        is_published=False,
        created_by=current_user.id,
    )
    db.add(lecture)
    db.commit()
    db.refresh(lecture)
    logger.info("[lectures] lecture %s created by %s", lecture.id, current_user.id)
    return {"success": True, "message": "Lecture created", "data": LectureResponse.model_validate(lecture)}


@router.patch("/{lecture_id}", response_model=APIResponse)
def update_lecture(
    lecture_id: uuid.UUID,
    lecture_in: LectureUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    lecture = db.query(Lecture).filter(Lecture.id == lecture_id).first()
    if not lecture:
        return {"success": False, "message": "Lecture not found", "data": None}

    update_data = lecture_in.model_dump(exclude_unset=True)
    if "title" in update_data:
        title = sanitize_input(update_data["title"], 200)
        if not title:
            return {"success": False, "message": "Title is required", "data": None}
        lecture.title = title
    if "description" in update_data:
        lecture.description = sanitize_input(update_data["description"], 5000)
    if update_data.get("youtube_url"):
        lecture.youtube_url = update_data["youtube_url"]
    if update_data.get("is_published") is not None:
        lecture.is_published = update_data["is_published"]

    db.commit()
    db.refresh(lecture)
    return {"success": True, "message": "Lecture updated", "data": LectureResponse.model_validate(lecture)}


@router.delete("/{lecture_id}", response_model=APIResponse)
def delete_lecture(
    lecture_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    lecture = db.query(Lecture).filter(Lecture.id == lecture_id).first()
    if not lecture:
        return {"success": False, "message": "Lecture not found", "data": None}

    db.delete(lecture)
    db.commit()
    logger.info("[lectures] lecture %s deleted by %s", lecture_id, current_user.id)
    return {"success": True, "message": "Lecture deleted", "data": None}
