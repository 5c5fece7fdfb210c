from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import can_access_class, is_manager, verify_student_in_class
from academy.core.security import is_image_attachment, sanitize_input
from academy.models.community import PhotoDiaryComment, PhotoDiaryEntry, PhotoDiaryLike
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.community import (
    PhotoDiaryCommentCreate,
    PhotoDiaryCommentResponse,
    PhotoDiaryCreate,
    PhotoDiaryResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _can_view_class(db: Session, profile: Profile, class_id: uuid.UUID) -> bool:
    if profile.role.value == "student":
        return verify_student_in_class(db, profile.id, class_id)
    return can_access_class(db, profile, class_id)


def _get_visible_entry(db: Session, entry_id: uuid.UUID, profile: Profile):
    entry = db.query(PhotoDiaryEntry).filter(PhotoDiaryEntry.id == entry_id).first()
    if not entry:
        return None
    if entry.class_id and not _can_view_class(db, profile, entry.class_id):
        return None
    return entry


@router.get("", response_model=APIResponse)
def list_entries(
    class_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    if not _can_view_class(db, current_user, class_id):
        return {"success": False, "message": "You do not belong to this class", "data": None}

    entries = (
        db.query(PhotoDiaryEntry)
        .filter(PhotoDiaryEntry.class_id == class_id)
        .order_by(PhotoDiaryEntry.created_at.desc())
        .all()
    )
    data = [
        {
            "entry": PhotoDiaryResponse.model_validate(entry),
            "like_count": len(entry.likes),
            "liked_by_me": any(like.user_id == current_user.id for like in entry.likes),
        }
        for entry in entries
    ]
    return {"success": True, "message": "Photo diary retrieved successfully", "data": data}


@router.post("", response_model=APIResponse)
def create_entry(
    entry_in: PhotoDiaryCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    if not can_access_class(db, current_user, entry_in.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    image_paths = [path.strip() for path in entry_in.image_paths if path and path.strip()]
    if not image_paths:
        return {"success": False, "message": "Add at least one photo", "data": None}
    if any(not is_image_attachment(path, None) for path in image_paths):
        return {"success": False, "message": "Only image files can be posted", "data": None}

    entry = PhotoDiaryEntry(
        class_id=entry_in.class_id,
        author_id=current_user.id,
        caption=sanitize_input(entry_in.caption),
        image_paths=image_paths,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return {"success": True, "message": "Photo diary posted", "data": PhotoDiaryResponse.model_validate(entry)}


@router.delete("/{entry_id}", response_model=APIResponse)
def delete_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["teacher", "manager"])),
):
    entry = db.query(PhotoDiaryEntry).filter(PhotoDiaryEntry.id == entry_id).first()
    if not entry:
        return {"success": False, "message": "Photo diary not found", "data": None}
    if entry.author_id != current_user.id and not is_manager(current_user):
        return {"success": False, "message": "You cannot delete this post", "data": None}

    db.delete(entry)
    db.commit()
    return {"success": True, "message": "Photo diary deleted", "data": None}


@router.post("/{entry_id}/like", response_model=APIResponse)
def toggle_like(
    entry_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    entry = _get_visible_entry(db, entry_id, current_user)
    if not entry:
        return {"success": False, "message": "Photo diary not found", "data": None}

    like = db.query(PhotoDiaryLike).filter(
        PhotoDiaryLike.entry_id == entry.id,
        PhotoDiaryLike.user_id == current_user.id,
    ).first()
    if like:
        db.delete(like)
        liked = False
    else:
        db.add(PhotoDiaryLike(entry_id=entry.id, user_id=current_user.id))
        liked = True
    db.commit()

    like_count = db.query(PhotoDiaryLike).filter(PhotoDiaryLike.entry_id == entry.id).count()
    return {
        "success": True,
        "message": "Like added" if liked else "Like removed",
        "data": {"liked": liked, "like_count": like_count},
    }


@router.post("/{entry_id}/comments", response_model=APIResponse)
def add_comment(
    entry_id: uuid.UUID,
    comment_in: PhotoDiaryCommentCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    entry = _get_visible_entry(db, entry_id, current_user)
    if not entry:
        return {"success": False, "message": "Photo diary not found", "data": None}

    body = sanitize_input(comment_in.body, 1000)
    if not body:
        return {"success": False, "message": "Comment cannot be empty", "data": None}

    comment = PhotoDiaryComment(entry_id=entry.id, user_id=current_user.id, body=body)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return {"success": True, "message": "Comment added", "data": PhotoDiaryCommentResponse.model_validate(comment)}


@router.delete("/comments/{comment_id}", response_model=APIResponse)
def delete_comment(
    comment_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    comment = db.query(PhotoDiaryComment).filter(PhotoDiaryComment.id == comment_id).first()
    if not comment:
        return {"success": False, "message": "Comment not found", "data": None}
    if comment.user_id != current_user.id and not is_manager(current_user):
        return {"success": False, "message": "You cannot delete this comment", "data": None}

    db.delete(comment)
    db.commit()
    return {"success": True, "message": "Comment deleted", "data": None}
