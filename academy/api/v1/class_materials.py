from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager
from academy.core.security import sanitize_input
from academy.models.materials import (
    ClassMaterialAssetType,
    ClassMaterialPost,
    ClassMaterialPrintRequest,
    ClassMaterialPrintRequestItem,
    ClassMaterialSubject,
    PrintRequestStatus,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.materials import (
    ClassMaterialPostResponse,
    ClassMaterialPostSave,
    PrintRequestCreate,
    PrintRequestResponse,
    PrintRequestStatusUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])
manager_only = deps.RoleChecker(["manager"])

ASSET_LABELS = {
    ClassMaterialAssetType.class_material: "class material",
    ClassMaterialAssetType.student_handout: "student handout",
}


def _can_edit(post: ClassMaterialPost, current_user: Profile) -> bool:
    return post.created_by == current_user.id or is_manager(current_user)


def _apply_post_fields(post: ClassMaterialPost, post_in: ClassMaterialPostSave) -> None:
    post.title = post_in.title
    post.week_label = sanitize_input(post_in.week_label, 50)
    post.description = sanitize_input(post_in.description, 5000)
    post.class_material_path = post_in.class_material_path
    post.class_material_name = (
        sanitize_input(post_in.class_material_name, 200) if post_in.class_material_path else None
    )
    post.student_handout_path = post_in.student_handout_path
    post.student_handout_name = (
        sanitize_input(post_in.student_handout_name, 200) if post_in.student_handout_path else None
    )


# ==================== PRINT REQUESTS ====================


@router.get("/print-requests", response_model=APIResponse)
def list_print_requests(
    status: Optional[PrintRequestStatus] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Managers see the whole print queue, teachers their own requests"""
    query = db.query(ClassMaterialPrintRequest)
    if not is_manager(current_user):
        query = query.filter(ClassMaterialPrintRequest.requested_by == current_user.id)
    if status:
        query = query.filter(ClassMaterialPrintRequest.status == status)
    requests = query.order_by(ClassMaterialPrintRequest.created_at.desc()).all()

    data = [
        {
            "request": PrintRequestResponse.model_validate(r),
            "post_title": r.post.title if r.post else None,
            "requester_name": r.requester.display_name if r.requester else None,
        }
        for r in requests
    ]
    return {"success": True, "message": "Print requests retrieved successfully", "data": data}


@router.post("/print-requests/{request_id}/cancel", response_model=APIResponse)
def cancel_print_request(
    request_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    request = (
        db.query(ClassMaterialPrintRequest)
        .filter(ClassMaterialPrintRequest.id == request_id)
        .first()
    )
    if not request:
        return {"success": False, "message": "Print request not found", "data": None}
    if request.status != PrintRequestStatus.requested:
        return {
            "success": False,
            "message": "Requests already in progress or finished cannot be canceled",
            "data": None,
        }
    if request.requested_by != current_user.id and not is_manager(current_user):
        return {"success": False, "message": "You cannot cancel this print request", "data": None}

    request.status = PrintRequestStatus.canceled
    db.commit()
    db.refresh(request)
    return {"success": True, "message": "Print request canceled", "data": PrintRequestResponse.model_validate(request)}


@router.patch("/print-requests/{request_id}", response_model=APIResponse)
def update_print_request_status(
    request_id: uuid.UUID,
    status_in: PrintRequestStatusUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    request = (
        db.query(ClassMaterialPrintRequest)
        .filter(ClassMaterialPrintRequest.id == request_id)
        .first()
    )
    if not request:
        return {"success": False, "message": "Print request not found", "data": None}
    if request.status in (PrintRequestStatus.canceled, PrintRequestStatus.completed):
        return {"success": False, "message": f"The request is already {request.status.value}", "data": None}

    request.status = status_in.status
    request.handled_by = current_user.id
    db.commit()
    db.refresh(request)
    logger.info("[class-materials] print request %s -> %s", request.id, request.status.value)
    return {"success": True, "message": "Print request updated", "data": PrintRequestResponse.model_validate(request)}


# ==================== POSTS ====================


@router.get("", response_model=APIResponse)
def list_posts(
    subject: Optional[ClassMaterialSubject] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    query = db.query(ClassMaterialPost)
    if subject:
        query = query.filter(ClassMaterialPost.subject == subject)
    posts = query.order_by(ClassMaterialPost.created_at.desc()).all()

    data = [
        {
            "post": ClassMaterialPostResponse.model_validate(p),
            "author_name": p.author.display_name if p.author else None,
        }
        for p in posts
    ]
    return {"success": True, "message": "Class materials retrieved successfully", "data": data}


@router.get("/{post_id}", response_model=APIResponse)
def get_post(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(ClassMaterialPost).filter(ClassMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Class material not found", "data": None}

    query = db.query(ClassMaterialPrintRequest).filter(ClassMaterialPrintRequest.post_id == post.id)
    if not is_manager(current_user):
        query = query.filter(ClassMaterialPrintRequest.requested_by == current_user.id)
    requests = query.order_by(ClassMaterialPrintRequest.created_at.desc()).all()
    return {
        "success": True,
        "message": "Class material retrieved successfully",
        "data": {
            "post": ClassMaterialPostResponse.model_validate(post),
            "author_name": post.author.display_name if post.author else None,
            "print_requests": [PrintRequestResponse.model_validate(r) for r in requests],
        },
    }


@router.post("", response_model=APIResponse)
def create_post(
    post_in: ClassMaterialPostSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = ClassMaterialPost(subject=post_in.subject, created_by=current_user.id)
    _apply_post_fields(post, post_in)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("[class-materials] post %s created by %s", post.id, current_user.id)
    return {"success": True, "message": "Class material posted", "data": ClassMaterialPostResponse.model_validate(post)}


@router.put("/{post_id}", response_model=APIResponse)
def update_post(
    post_id: uuid.UUID,
    post_in: ClassMaterialPostSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(ClassMaterialPost).filter(ClassMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Class material not found", "data": None}
    if not _can_edit(post, current_user):
        return {"success": False, "message": "Only the author or a manager can edit this post", "data": None}
    if post.subject != post_in.subject:
        return {"success": False, "message": "The subject does not match this post", "data": None}

    _apply_post_fields(post, post_in)
    db.commit()
    db.refresh(post)
    return {"success": True, "message": "Class material updated", "data": ClassMaterialPostResponse.model_validate(post)}


@router.delete("/{post_id}", response_model=APIResponse)
def delete_post(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(ClassMaterialPost).filter(ClassMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Class material not found", "data": None}
    if not _can_edit(post, current_user):
        return {"success": False, "message": "Only the author or a manager can delete this post", "data": None}

    db.delete(post)
    db.commit()
    return {"success": True, "message": "Class material deleted", "data": None}


@router.post("/{post_id}/print-requests", response_model=APIResponse)
def create_print_request(
    post_id: uuid.UUID,
    request_in: PrintRequestCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(ClassMaterialPost).filter(ClassMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Class material not found", "data": None}

    items = []
    for asset_type in request_in.assets:
        path, name = post.asset(asset_type)
        if not path:
            return {
                "success": False,
                "message": f"This post has no {ASSET_LABELS[asset_type]} file",
                "data": None,
            }
        items.append(
            ClassMaterialPrintRequestItem(
                asset_type=asset_type,
                asset_path=path,
                asset_filename=name or path.rsplit("/", 1)[-1],
            )
        )

    request = ClassMaterialPrintRequest(
        post_id=post.id,
        requested_by=current_user.id,
        copies=request_in.copies,
        color_mode=request_in.color_mode,
        desired_date=request_in.desired_date,
        desired_period=sanitize_input(request_in.desired_period, 50),
        notes=sanitize_input(request_in.notes, 500),
        status=PrintRequestStatus.requested,
        items=items,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("[class-materials] print request %s for post %s", request.id, post.id)
    return {"success": True, "message": "Print request submitted", "data": PrintRequestResponse.model_validate(request)}
