from typing import List, Optional
from datetime import date, datetime, time, timedelta, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager
from academy.core.security import sanitize_input
from academy.models.materials import (
    AdmissionMaterialCategory,
    AdmissionMaterialPost,
    AdmissionMaterialSchedule,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.materials import (
    AdmissionMaterialPostResponse,
    AdmissionMaterialPostSave,
    AdmissionScheduleIn,
)

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])

CATEGORY_LABELS = {
    AdmissionMaterialCategory.guideline: "University admission guidelines",
    AdmissionMaterialCategory.past_exam: "Past exam materials",
    AdmissionMaterialCategory.success_review: "Successful applicant reviews",
}

PAST_EXAM_UNIVERSITIES = [
    "Kookmin",
    "Dankook",
    "Dong-ah Institute of Media and Arts",
    "Daejin",
    "Baekseok Arts",
    "Sangmyung",
    "Seokyeong",
    "Seoul Institute of the Arts",
    "Sungkyul",
    "Sejong",
    "Suwon",
    "Soonchunhyang",
    "Soongsil",
    "Yongin",
    "Chung-Ang",
    "Cheongju",
    "K-ARTS",
    "Inha",
    "Myongji",
]


def normalize_university_name(raw: Optional[str]) -> Optional[str]:
    """Map free text like "Chung-Ang University" onto the known short name"""
    if not raw or not raw.strip():
        return None
    trimmed = raw.strip()
    if trimmed in PAST_EXAM_UNIVERSITIES:
        return trimmed
    for name in PAST_EXAM_UNIVERSITIES:
        if name.lower() in trimmed.lower():
            return name
    return trimmed


def _build_schedules(schedules_in: List[AdmissionScheduleIn], current_user: Profile):
    return [
        AdmissionMaterialSchedule(
            title=s.title,
            start_at=s.start_at,
            end_at=s.end_at,
            location=sanitize_input(s.location, 200),
            memo=sanitize_input(s.memo, 1000),
            created_by=current_user.id,
        )
        for s in schedules_in
    ]


def _apply_post_fields(post: AdmissionMaterialPost, post_in: AdmissionMaterialPostSave) -> None:
    post.title = post_in.title
    post.target_level = post_in.target_level
    post.description = sanitize_input(post_in.description, 5000)
    post.past_exam_year = post_in.past_exam_year
    post.past_exam_university = post_in.past_exam_university
    post.past_exam_admission_types = post_in.past_exam_admission_types
    post.guide_path = post_in.guide_path
    post.guide_name = sanitize_input(post_in.guide_name, 200) if post_in.guide_path else None
    post.resource_path = post_in.resource_path
    post.resource_name = sanitize_input(post_in.resource_name, 200) if post_in.resource_path else None


def _can_edit(post: AdmissionMaterialPost, current_user: Profile) -> bool:
    return post.created_by == current_user.id or is_manager(current_user)


@router.get("/calendar", response_model=APIResponse)
def list_schedule_events(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Schedules from every admission post, for the calendar view"""
    query = db.query(AdmissionMaterialSchedule).join(
        AdmissionMaterialPost, AdmissionMaterialSchedule.post_id == AdmissionMaterialPost.id
    )
    if start:
        query = query.filter(
            AdmissionMaterialSchedule.start_at >= datetime.combine(start, time.min, tzinfo=timezone.utc)
        )
    if end:
        query = query.filter(
            AdmissionMaterialSchedule.start_at
            < datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
        )
    schedules = query.order_by(AdmissionMaterialSchedule.start_at.asc()).all()

    events = []
    for schedule in schedules:
        post = schedule.post
        if post.category == AdmissionMaterialCategory.guideline:
            university = normalize_university_name(post.target_level)
        else:
            university = normalize_university_name(post.past_exam_university or post.target_level)
        events.append(
            {
                "id": str(schedule.id),
                "post_id": str(post.id),
                "category": post.category.value,
                "category_label": CATEGORY_LABELS[post.category],
                "post_title": post.title,
                "post_target_level": post.target_level,
                "post_university": university,
                "schedule_title": schedule.title,
                "start_at": schedule.start_at,
                "end_at": schedule.end_at,
                "location": schedule.location,
                "memo": schedule.memo,
            }
        )
    return {"success": True, "message": "Schedule events retrieved successfully", "data": events}


@router.get("", response_model=APIResponse)
def list_posts(
    category: Optional[AdmissionMaterialCategory] = None,
    university: Optional[str] = None,
    year: Optional[int] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    query = db.query(AdmissionMaterialPost)
    if category:
        query = query.filter(AdmissionMaterialPost.category == category)
    if year:
        query = query.filter(AdmissionMaterialPost.past_exam_year == year)
    posts = query.order_by(AdmissionMaterialPost.created_at.desc()).all()

    if university:
        wanted = normalize_university_name(university)
        posts = [
            p for p in posts
            if normalize_university_name(p.past_exam_university or p.target_level) == wanted
        ]
    return {
        "success": True,
        "message": "Admission materials retrieved successfully",
        "data": [AdmissionMaterialPostResponse.model_validate(p) for p in posts],
    }


@router.get("/{post_id}", response_model=APIResponse)
def get_post(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(AdmissionMaterialPost).filter(AdmissionMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Admission material not found", "data": None}
    return {
        "success": True,
        "message": "Admission material retrieved successfully",
        "data": AdmissionMaterialPostResponse.model_validate(post),
    }


@router.post("", response_model=APIResponse)
def create_post(
    post_in: AdmissionMaterialPostSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = AdmissionMaterialPost(category=post_in.category, created_by=current_user.id)
    _apply_post_fields(post, post_in)
    post.schedules = _build_schedules(post_in.schedules, current_user)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info(
        "[admission-materials] post %s created with %d schedules", post.id, len(post.schedules)
    )
    return {
        "success": True,
        "message": "Admission material posted",
        "data": AdmissionMaterialPostResponse.model_validate(post),
    }


@router.put("/{post_id}", response_model=APIResponse)
def update_post(
    post_id: uuid.UUID,
    post_in: AdmissionMaterialPostSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Replace the post and its schedules"""
    post = db.query(AdmissionMaterialPost).filter(AdmissionMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Admission material not found", "data": None}
    if not _can_edit(post, current_user):
        return {"success": False, "message": "Only the author or a manager can edit this post", "data": None}
    if post.category != post_in.category:
        return {"success": False, "message": "The category does not match this post", "data": None}

    _apply_post_fields(post, post_in)
    post.schedules.clear()
    db.flush()
    post.schedules.extend(_build_schedules(post_in.schedules, current_user))
    db.commit()
    db.refresh(post)
    return {
        "success": True,
        "message": "Admission material updated",
        "data": AdmissionMaterialPostResponse.model_validate(post),
    }


@router.delete("/{post_id}", response_model=APIResponse)
def delete_post(
    post_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    post = db.query(AdmissionMaterialPost).filter(AdmissionMaterialPost.id == post_id).first()
    if not post:
        return {"success": False, "message": "Admission material not found", "data": None}
    if not _can_edit(post, current_user):
        return {"success": False, "message": "Only the author or a manager can delete this post", "data": None}

    db.delete(post)
    db.commit()
    return {"success": True, "message": "Admission material deleted", "data": None}
