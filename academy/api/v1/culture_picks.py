from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager
from academy.core.security import sanitize_input
from academy.models.community import (
    CulturePick,
    CulturePickCategory,
    CulturePickReview,
    CulturePickReviewComment,
    CulturePickReviewLike,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.community import (
    CulturePickCreate,
    CulturePickResponse,
    CulturePickUpdate,
    ReviewCommentCreate,
    ReviewCommentResponse,
    ReviewCommentUpdate,
    ReviewResponse,
    ReviewUpsert,
)

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _serialize_review(review: CulturePickReview, current_user: Profile) -> dict:
    return {
        "review": ReviewResponse.model_validate(review),
        "like_count": len(review.likes),
        "liked_by_me": any(like.user_id == current_user.id for like in review.likes),
        "comments": [ReviewCommentResponse.model_validate(c) for c in review.comments],
    }


def _get_pick(db: Session, pick_id: uuid.UUID) -> Optional[CulturePick]:
    return db.query(CulturePick).filter(CulturePick.id == pick_id).first()


def _get_review(db: Session, review_id: uuid.UUID) -> Optional[CulturePickReview]:
    return db.query(CulturePickReview).filter(CulturePickReview.id == review_id).first()


# ==================== PICKS ====================


@router.get("", response_model=APIResponse)
def list_picks(
    category: Optional[CulturePickCategory] = None,
    period_label: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    query = db.query(CulturePick)
    if category:
        query = query.filter(CulturePick.category == category)
    if period_label:
        query = query.filter(CulturePick.period_label == period_label)
    picks = query.order_by(CulturePick.created_at.desc()).all()

    data = []
    for pick in picks:
        ratings = [review.rating for review in pick.reviews]
        data.append({
            "pick": CulturePickResponse.model_validate(pick),
            "review_count": len(ratings),
            "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else None,
        })
    return {"success": True, "message": "Culture picks retrieved successfully", "data": data}


@router.get("/{pick_id}", response_model=APIResponse)
def get_pick(
    pick_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    pick = _get_pick(db, pick_id)
    if not pick:
        return {"success": False, "message": "Culture pick not found", "data": None}
    return {
        "success": True,
        "message": "Culture pick retrieved successfully",
        "data": {
            "pick": CulturePickResponse.model_validate(pick),
            "reviews": [_serialize_review(r, current_user) for r in pick.reviews],
        },
    }


@router.post("", response_model=APIResponse)
def create_pick(
    pick_in: CulturePickCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    pick = CulturePick(
        **pick_in.model_dump(exclude={"description"}),
        description=sanitize_input(pick_in.description),
        teacher_id=current_user.id,
    )
    db.add(pick)
    db.commit()
    db.refresh(pick)
    return {"success": True, "message": "Culture pick created", "data": CulturePickResponse.model_validate(pick)}


@router.patch("/{pick_id}", response_model=APIResponse)
def update_pick(
    pick_id: uuid.UUID,
    pick_in: CulturePickUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    pick = _get_pick(db, pick_id)
    if not pick:
        return {"success": False, "message": "Culture pick not found", "data": None}
    if pick.teacher_id != current_user.id and not is_manager(current_user):
        return {"success": False, "message": "You can only modify your own picks", "data": None}

    changes = pick_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}

    for field, value in changes.items():
        if field in ("title", "creator", "period_label"):
            value = (value or "").strip()
            if not value:
                return {"success": False, "message": f"{field} cannot be empty", "data": None}
        elif field == "category" and value is None:
            continue
        elif field == "description":
            value = sanitize_input(value)
        setattr(pick, field, value)

    db.commit()
    db.refresh(pick)
    return {"success": True, "message": "Culture pick updated", "data": CulturePickResponse.model_validate(pick)}


@router.delete("/{pick_id}", response_model=APIResponse)
def delete_pick(
    pick_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    pick = _get_pick(db, pick_id)
    if not pick:
        return {"success": False, "message": "Culture pick not found", "data": None}
    if pick.teacher_id != current_user.id and not is_manager(current_user):
        return {"success": False, "message": "You can only delete your own picks", "data": None}

    db.delete(pick)
    db.commit()
    return {"success": True, "message": "Culture pick deleted", "data": None}


# ==================== REVIEWS ====================


@router.put("/{pick_id}/reviews", response_model=APIResponse)
def upsert_review(
    pick_id: uuid.UUID,
    review_in: ReviewUpsert,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    """One review per user and pick; posting again edits it"""
    pick = _get_pick(db, pick_id)
    if not pick:
        return {"success": False, "message": "Culture pick not found", "data": None}

    review = db.query(CulturePickReview).filter(
        CulturePickReview.pick_id == pick.id,
        CulturePickReview.user_id == current_user.id,
    ).first()
    if review is None:
        review = CulturePickReview(pick_id=pick.id, user_id=current_user.id)
        db.add(review)
    review.rating = review_in.rating
    review.comment = sanitize_input(review_in.comment, 500)

    db.commit()
    db.refresh(review)
    return {"success": True, "message": "Review saved", "data": ReviewResponse.model_validate(review)}


@router.delete("/{pick_id}/reviews", response_model=APIResponse)
def delete_my_review(
    pick_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    review = db.query(CulturePickReview).filter(
        CulturePickReview.pick_id == pick_id,
        CulturePickReview.user_id == current_user.id,
    ).first()
    if not review:
        return {"success": False, "message": "Review not found", "data": None}

    db.delete(review)
    db.commit()
    return {"success": True, "message": "Review deleted", "data": None}


@router.post("/reviews/{review_id}/like", response_model=APIResponse)
def toggle_review_like(
    review_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    review = _get_review(db, review_id)
    if not review:
        return {"success": False, "message": "Review not found", "data": None}

    like = db.query(CulturePickReviewLike).filter(
        CulturePickReviewLike.review_id == review.id,
        CulturePickReviewLike.user_id == current_user.id,
    ).first()
    if like:
        db.delete(like)
        liked = False
    else:
        db.add(CulturePickReviewLike(review_id=review.id, user_id=current_user.id))
        liked = True
    db.commit()

    like_count = db.query(CulturePickReviewLike).filter(CulturePickReviewLike.review_id == review.id).count()
    return {
        "success": True,
        "message": "Like added" if liked else "Like removed",
        "data": {"liked": liked, "like_count": like_count},
    }


@router.post("/reviews/{review_id}/comments", response_model=APIResponse)
def create_review_comment(
    review_id: uuid.UUID,
    comment_in: ReviewCommentCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    review = _get_review(db, review_id)
    if not review:
        return {"success": False, "message": "Review not found", "data": None}

    if comment_in.parent_id:
        parent = db.query(CulturePickReviewComment).filter(
            CulturePickReviewComment.id == comment_in.parent_id
        ).first()
        if not parent or parent.review_id != review.id:
            return {"success": False, "message": "Parent comment not found", "data": None}

    body = sanitize_input(comment_in.body, 1000)
    if not body:
        return {"success": False, "message": "Comment cannot be empty", "data": None}

    comment = CulturePickReviewComment(
        review_id=review.id,
        parent_id=comment_in.parent_id,
        user_id=current_user.id,
        body=body,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return {"success": True, "message": "Comment added", "data": ReviewCommentResponse.model_validate(comment)}


@router.patch("/comments/{comment_id}", response_model=APIResponse)
def update_review_comment(
    comment_id: uuid.UUID,
    comment_in: ReviewCommentUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    comment = db.query(CulturePickReviewComment).filter(CulturePickReviewComment.id == comment_id).first()
    if not comment or comment.user_id != current_user.id:
        return {"success": False, "message": "Comment not found", "data": None}

    body = sanitize_input(comment_in.body, 1000)
    if not body:
        return {"success": False, "message": "Comment cannot be empty", "data": None}

    comment.body = body
    db.commit()
    db.refresh(comment)
    return {"success": True, "message": "Comment updated", "data": ReviewCommentResponse.model_validate(comment)}


@router.delete("/comments/{comment_id}", response_model=APIResponse)
def delete_review_comment(
    comment_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    comment = db.query(CulturePickReviewComment).filter(CulturePickReviewComment.id == comment_id).first()
    if not comment:
        return {"success": False, "message": "Comment not found", "data": None}
    if comment.user_id != current_user.id and not is_manager(current_user):
        return {"success": False, "message": "You cannot delete this comment", "data": None}

    db.delete(comment)
    db.commit()
    return {"success": True, "message": "Comment deleted", "data": None}
