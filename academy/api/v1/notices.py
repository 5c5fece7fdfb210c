from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager
from academy.core.security import sanitize_input
from academy.models.notices import (
    Notice,
    NoticeApplication,
    NoticeAttachment,
    NoticeRecipient,
)
from academy.models.profiles import Profile, ProfileStatus
from academy.schemas.common import APIResponse
from academy.schemas.notices import (
    NoticeApplicationCreate,
    NoticeApplicationResponse,
    NoticeCreate,
    NoticeResponse,
    NoticeUpdate,
)
from academy.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _can_edit_notice(profile: Profile, notice: Notice) -> bool:
    return notice.author_id == profile.id or is_manager(profile)


def _get_recipient(notice: Notice, profile_id: uuid.UUID) -> Optional[NoticeRecipient]:
    for recipient in notice.recipients:
        if recipient.recipient_id == profile_id:
            return recipient
    return None


def _build_attachments(attachments) -> List[NoticeAttachment]:
    return [
        NoticeAttachment(
            file_path=a.file_path.strip(),
            file_name=a.file_name.strip(),
            mime_type=a.mime_type,
            size=a.size,
        )
        for a in attachments
    ]


def validate_application_form(config: Optional[Dict[str, Any]], form_data: Dict[str, Any]) -> Dict[str, Any]:
    """Check answers against the notice form and return the cleaned answers."""
    fields = (config or {}).get("fields") or []
    cleaned: Dict[str, Any] = {}

    for field in fields:
        field_id = field["id"]
        value = form_data.get(field_id)
        field_type = field.get("type", "text")

        if field_type == "checkbox":
            checked = value is True
            if field.get("required") and not checked:
                raise ValueError(f"'{field['label']}' must be checked")
            cleaned[field_id] = checked
            continue

        text = sanitize_input(str(value)) if value is not None else None
        if field.get("required") and not text:
            raise ValueError(f"'{field['label']}' is required")
        if text and field_type == "select" and text not in field.get("options", []):
            raise ValueError(f"'{field['label']}' has an invalid option")
        cleaned[field_id] = text

    return cleaned


@router.post("", response_model=APIResponse)
def create_notice(
    notice_in: NoticeCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    recipient_ids = [
        rid for rid in dict.fromkeys(notice_in.recipient_ids) if rid != current_user.id
    ]
    if not recipient_ids:
        return {"success": False, "message": "Select at least one recipient", "data": None}

    found = (
        db.query(Profile.id)
        .filter(Profile.id.in_(recipient_ids), Profile.status == ProfileStatus.approved)
        .all()
    )
    if len(found) != len(recipient_ids):
        return {"success": False, "message": "One or more recipients were not found", "data": None}

    notice = Notice(
        author_id=current_user.id,
        title=notice_in.title.strip(),
        body=notice_in.body.strip(),
        target_scope=notice_in.target_scope,
        requires_application=notice_in.requires_application,
        application_config=(
            notice_in.application_config.model_dump()
            if notice_in.requires_application and notice_in.application_config
            else None
        ),
        application_deadline=notice_in.application_deadline if notice_in.requires_application else None,
        max_applicants=notice_in.max_applicants if notice_in.requires_application else None,
        recipients=[NoticeRecipient(recipient_id=rid) for rid in recipient_ids],
        attachments=_build_attachments(notice_in.attachments),
    )
    db.add(notice)
    db.commit()
    db.refresh(notice)
    logger.info("[notices] %s sent by %s to %s recipients", notice.id, current_user.id, len(recipient_ids))

    return {"success": True, "message": "Notice created", "data": NoticeResponse.model_validate(notice)}


@router.get("", response_model=APIResponse)
def list_notices(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    """Notices the current user wrote or received"""
    received = select(NoticeRecipient.notice_id).where(NoticeRecipient.recipient_id == current_user.id)
    notices = (
        db.query(Notice)
        .filter(or_(Notice.author_id == current_user.id, Notice.id.in_(received)))
        .order_by(Notice.created_at.desc())
        .all()
    )

    data = []
    for notice in notices:
        recipient = _get_recipient(notice, current_user.id)
        data.append({
            "notice": NoticeResponse.model_validate(notice),
            "is_author": notice.author_id == current_user.id,
            "acknowledged_at": recipient.acknowledged_at if recipient else None,
            "application_count": len(notice.applications),
        })
    return {"success": True, "message": "Notices retrieved successfully", "data": data}


@router.post("/{notice_id}/acknowledge", response_model=APIResponse)
def acknowledge_notice(
    notice_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    notice = db.query(Notice).filter(Notice.id == notice_id).first()
    recipient = _get_recipient(notice, current_user.id) if notice else None
    if not recipient:
        return {"success": False, "message": "Notice not found", "data": None}

    if recipient.acknowledged_at is None:
        recipient.acknowledged_at = utcnow()
        db.commit()
        db.refresh(recipient)

    return {
        "success": True,
        "message": "Notice acknowledged",
        "data": {"notice_id": notice.id, "acknowledged_at": recipient.acknowledged_at},
    }


@router.post("/{notice_id}/applications", response_model=APIResponse)
def apply_to_notice(
    notice_id: uuid.UUID,
    application_in: NoticeApplicationCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    notice = db.query(Notice).filter(Notice.id == notice_id).first()
    if not notice or not _get_recipient(notice, current_user.id):
        return {"success": False, "message": "Notice not found", "data": None}
    if not notice.requires_application:
        return {"success": False, "message": "This notice does not take applications", "data": None}

    deadline = as_utc(notice.application_deadline)
    if deadline and utcnow() > deadline:
        return {"success": False, "message": "The application deadline has passed", "data": None}

    existing = db.query(NoticeApplication).filter(
        NoticeApplication.notice_id == notice.id,
        NoticeApplication.applicant_id == current_user.id,
    ).first()
    if existing:
        return {"success": False, "message": "You have already applied", "data": None}

    if notice.max_applicants and len(notice.applications) >= notice.max_applicants:
        return {"success": False, "message": "Applications are full", "data": None}

    try:
        form_data = validate_application_form(notice.application_config, application_in.form_data)
    except ValueError as e:
        return {"success": False, "message": str(e), "data": None}

    application = NoticeApplication(
        notice_id=notice.id,
        applicant_id=current_user.id,
        form_data=form_data,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return {
        "success": True,
        "message": "Application submitted",
        "data": NoticeApplicationResponse.model_validate(application),
    }


@router.delete("/{notice_id}/applications", response_model=APIResponse)
def cancel_application(
    notice_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    application = db.query(NoticeApplication).filter(
        NoticeApplication.notice_id == notice_id,
        NoticeApplication.applicant_id == current_user.id,
    ).first()
    if not application:
        return {"success": False, "message": "Application not found", "data": None}

    db.delete(application)
    db.commit()
    return {"success": True, "message": "Application cancelled", "data": None}


@router.get("/{notice_id}/applications", response_model=APIResponse)
def list_applications(
    notice_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    notice = db.query(Notice).filter(Notice.id == notice_id).first()
    if not notice or not _can_edit_notice(current_user, notice):
        return {"success": False, "message": "Notice not found", "data": None}

    return {
        "success": True,
        "message": "Applications retrieved successfully",
        "data": [NoticeApplicationResponse.model_validate(a) for a in notice.applications],
    }


@router.patch("/{notice_id}", response_model=APIResponse)
def update_notice(
    notice_id: uuid.UUID,
    notice_in: NoticeUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    notice = db.query(Notice).filter(Notice.id == notice_id).first()
    if not notice:
        return {"success": False, "message": "Notice not found", "data": None}
    if not _can_edit_notice(current_user, notice):
        return {"success": False, "message": "You cannot modify this notice", "data": None}

    changes = notice_in.model_dump(exclude_unset=True, exclude={"attachments", "application_config"})
    for field in ("title", "body"):
        if field in changes:
            value = (changes.pop(field) or "").strip()
            if not value:
                return {"success": False, "message": f"{field.capitalize()} cannot be empty", "data": None}
            setattr(notice, field, value)
    for field, value in changes.items():
        setattr(notice, field, value)

    if "application_config" in notice_in.model_fields_set:
        notice.application_config = (
            notice_in.application_config.model_dump() if notice_in.application_config else None
        )
    if notice_in.attachments is not None:
        notice.attachments.clear()
        db.flush()
        notice.attachments.extend(_build_attachments(notice_in.attachments))

    db.commit()
    db.refresh(notice)
    return {"success": True, "message": "Notice updated", "data": NoticeResponse.model_validate(notice)}


@router.delete("/{notice_id}", response_model=APIResponse)
def delete_notice(
    notice_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    notice = db.query(Notice).filter(Notice.id == notice_id).first()
    if not notice:
        return {"success": False, "message": "Notice not found", "data": None}
    if not _can_edit_notice(current_user, notice):
        return {"success": False, "message": "You cannot delete this notice", "data": None}

    db.delete(notice)
    db.commit()
    return {"success": True, "message": "Notice deleted", "data": None}
