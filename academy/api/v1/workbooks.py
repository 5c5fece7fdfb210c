from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import is_manager
from academy.models.lms import JournalSubject, Workbook, WorkbookItem, WorkbookType
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.lms import (
    WorkbookCreate,
    WorkbookItemCreate,
    WorkbookItemsUpdate,
    WorkbookResponse,
    WorkbookUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _build_items(items: List[WorkbookItemCreate]) -> List[WorkbookItem]:
    return [
        WorkbookItem(
            position=index,
            prompt=item.prompt.strip(),
            explanation=item.explanation,
            answer_type=item.answer_type,
            choices=[choice.model_dump() for choice in item.choices],
            short_fields=[field.model_dump() for field in item.short_fields],
            grading_criteria=item.grading_criteria,
        )
        for index, item in enumerate(items, start=1)
    ]


def _get_editable_workbook(db: Session, workbook_id: uuid.UUID, current_user: Profile):
    workbook = db.query(Workbook).filter(Workbook.id == workbook_id).first()
    if not workbook:
        return None, "Workbook not found"
    if workbook.teacher_id != current_user.id and not is_manager(current_user):
        return None, "You can only modify your own workbooks"
    return workbook, None


@router.get("", response_model=APIResponse)
def list_workbooks(
    subject: Optional[JournalSubject] = None,
    type: Optional[WorkbookType] = None,
    mine: bool = False,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    query = db.query(Workbook)
    if subject:
        query = query.filter(Workbook.subject == subject)
    if type:
        query = query.filter(Workbook.type == type)
    if mine:
        query = query.filter(Workbook.teacher_id == current_user.id)

    workbooks = query.order_by(Workbook.created_at.desc()).all()
    return {
        "success": True,
        "message": "Workbooks retrieved successfully",
        "data": [WorkbookResponse.model_validate(w) for w in workbooks],
    }


@router.get("/{workbook_id}", response_model=APIResponse)
def get_workbook(
    workbook_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    workbook = db.query(Workbook).filter(Workbook.id == workbook_id).first()
    if not workbook:
        return {"success": False, "message": "Workbook not found", "data": None}
    return {
        "success": True,
        "message": "Workbook retrieved successfully",
        "data": WorkbookResponse.model_validate(workbook),
    }


@router.post("", response_model=APIResponse)
def create_workbook(
    workbook_in: WorkbookCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    workbook = Workbook(
        teacher_id=current_user.id,
        title=workbook_in.title.strip(),
        subject=workbook_in.subject,
        type=workbook_in.type,
        week_label=workbook_in.week_label,
        tags=workbook_in.tags,
        summary=workbook_in.summary,
        config=workbook_in.config,
        items=_build_items(workbook_in.items),
    )
    db.add(workbook)
    db.commit()
    db.refresh(workbook)

    return {
        "success": True,
        "message": "Workbook created successfully",
        "data": WorkbookResponse.model_validate(workbook),
    }


@router.patch("/{workbook_id}", response_model=APIResponse)
def update_workbook(
    workbook_id: uuid.UUID,
    workbook_in: WorkbookUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    workbook, error = _get_editable_workbook(db, workbook_id, current_user)
    if error:
        return {"success": False, "message": error, "data": None}

    for field, value in workbook_in.model_dump(exclude_unset=True).items():
        setattr(workbook, field, value)

    db.commit()
    db.refresh(workbook)
    return {
        "success": True,
        "message": "Workbook updated successfully",
        "data": WorkbookResponse.model_validate(workbook),
    }


@router.put("/{workbook_id}/items", response_model=APIResponse)
def replace_workbook_items(
    workbook_id: uuid.UUID,
    items_in: WorkbookItemsUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Replace every item of a workbook"""
    workbook, error = _get_editable_workbook(db, workbook_id, current_user)
    if error:
        return {"success": False, "message": error, "data": None}

    if workbook.type == WorkbookType.srs:
        for index, item in enumerate(items_in.items, start=1):
            if not any(choice.is_correct for choice in item.choices):
                return {
                    "success": False,
                    "message": f"Question {index} needs at least one correct choice",
                    "data": None,
                }

    if workbook.assignments:
        return {
            "success": False,
            "message": "Items cannot be replaced once the workbook has been assigned",
            "data": None,
        }

    workbook.items.clear()
    db.flush()
    workbook.items.extend(_build_items(items_in.items))
    db.commit()
    db.refresh(workbook)

    return {
        "success": True,
        "message": "Workbook items updated",
        "data": WorkbookResponse.model_validate(workbook),
    }


@router.delete("/{workbook_id}", response_model=APIResponse)
def delete_workbook(
    workbook_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    workbook, error = _get_editable_workbook(db, workbook_id, current_user)
    if error:
        return {"success": False, "message": error, "data": None}

    db.delete(workbook)
    db.commit()
    return {"success": True, "message": "Workbook deleted successfully", "data": None}


@router.post("/{workbook_id}/duplicate", response_model=APIResponse)
def duplicate_workbook(
    workbook_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Copy a workbook and its items into a new workbook owned by the caller"""
    source = db.query(Workbook).filter(Workbook.id == workbook_id).first()
    if not source:
        return {"success": False, "message": "Workbook not found", "data": None}

    copy = Workbook(
        teacher_id=current_user.id,
        title=f"{source.title} (copy)",
        subject=source.subject,
        type=source.type,
        week_label=source.week_label,
        tags=list(source.tags or []),
        summary=source.summary,
        config=dict(source.config or {}),
        items=[
            WorkbookItem(
                position=item.position,
                prompt=item.prompt,
                explanation=item.explanation,
                answer_type=item.answer_type,
                choices=list(item.choices or []),
                short_fields=list(item.short_fields or []),
                grading_criteria=item.grading_criteria,
            )
            for item in source.items
        ],
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)

    return {
        "success": True,
        "message": "Workbook duplicated",
        "data": WorkbookResponse.model_validate(copy),
    }
