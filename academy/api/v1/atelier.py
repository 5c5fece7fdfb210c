from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import verify_student_in_class
from academy.core.security import sanitize_input
from academy.models.community import AtelierPost
from academy.models.profiles import Profile, STAFF_ROLES
from academy.schemas.common import APIResponse
from academy.schemas.community import AtelierPostCreate, AtelierPostResponse

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _is_staff(profile: Profile) -> bool:
    return profile.role.value in STAFF_ROLES


@router.get("", response_model=APIResponse)
def list_posts(
    class_id: Optional[uuid.UUID] = None,
    featured: Optional[bool] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    """Hidden posts are only listed for staff and their owner"""
    query = db.query(AtelierPost)
    if not _is_staff(current_user):
        query = query.filter(
            or_(AtelierPost.is_hidden.is_(False), AtelierPost.student_id == current_user.id)
        )
    if class_id:
        query = query.filter(AtelierPost.class_id == class_id)
    if featured is not None:
        query = query.filter(AtelierPost.is_featured.is_(featured))

    posts = query.order_by(AtelierPost.is_featured.desc(), AtelierPost.created_at.desc()).all()
    return {
        "success": True,
        "message": "Atelier posts retrieved successfully",
        "data": [AtelierPostResponse.model_validate(p) for p in posts],
    }


@router.post("", response_model=APIResponse)
def create_post(
    post_in: AtelierPostCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["student"])),
):
    title = sanitize_input(post_in.title, 200)
    if not title:
        return {"success": False, "message": "Title is required", "data": None}
    if post_in.class_id and not verify_student_in_class(db, current_user.id, post_in.class_id):
        return {"success": False, "message": "You do not belong to this class", "data": None}

    post = AtelierPost(
        student_id=current_user.id,
        class_id=post_in.class_id,
        title=title,
        description=sanitize_input(post_in.description),
        media_path=sanitize_input(post_in.media_path, 500),
        is_hidden=False,
        is_featured=False,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return {"success": True, "message": "Post created", "data": AtelierPostResponse.model_validate(post)}


@router.post("/{post_id}/hide", response_model=APIResponse)
def toggle_hidden(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(AtelierPost).filter(AtelierPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Post not found", "data": None}

    post.is_hidden = not post.is_hidden
    post.hidden_by = current_user.id if post.is_hidden else None
    db.commit()
    db.refresh(post)
    return {
        "success": True,
        "message": "Post hidden" if post.is_hidden else "Post visible",
        "data": AtelierPostResponse.model_validate(post),
    }


@router.post("/{post_id}/feature", response_model=APIResponse)
def toggle_featured(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(AtelierPost).filter(AtelierPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Post not found", "data": None}

    post.is_featured = not post.is_featured
    post.featured_by = current_user.id if post.is_featured else None
    db.commit()
    db.refresh(post)
    return {
        "success": True,
        "message": "Post featured" if post.is_featured else "Post unfeatured",
        "data": AtelierPostResponse.model_validate(post),
    }


@router.delete("/{post_id}", response_model=APIResponse)
def delete_post(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    post = db.query(AtelierPost).filter(AtelierPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Post not found", "data": None}
    if post.student_id != current_user.id and not _is_staff(current_user):
        return {"success": False, "message": "You cannot delete this post", "data": None}

    db.delete(post)
    db.commit()
    logger.info("[atelier] post %s removed by %s", post_id, current_user.id)
    return {"success": True, "message": "Post deleted", "data": None}
