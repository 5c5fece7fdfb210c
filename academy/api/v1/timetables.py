from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.models.classes import Class
from academy.models.profiles import Profile, STAFF_ROLES
from academy.models.timetables import (
    Timetable,
    TimetableAssignment,
    TimetablePeriod,
    TimetableTeacher,
)
from academy.schemas.common import APIResponse
from academy.schemas.timetables import (
    TimetableAssignmentResponse,
    TimetableCellAssign,
    TimetableCreate,
    TimetablePeriodCreate,
    TimetablePeriodResponse,
    TimetableResponse,
    TimetableTeacherAdd,
    TimetableTeacherColumnResponse,
)
from academy.utils.dates import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])
manager_only = deps.RoleChecker(["manager"])


def _touch(timetable: Timetable) -> None:
    timetable.updated_at = utcnow()


def _column_response(column: TimetableTeacher) -> TimetableTeacherColumnResponse:
    return TimetableTeacherColumnResponse(
        id=column.id,
        timetable_id=column.timetable_id,
        teacher_id=column.teacher_id,
        position=column.position,
        teacher_name=column.teacher.name if column.teacher else None,
        teacher_email=column.teacher.email if column.teacher else None,
    )


def _assignment_response(assignment: TimetableAssignment) -> TimetableAssignmentResponse:
    return TimetableAssignmentResponse(
        id=assignment.id,
        timetable_id=assignment.timetable_id,
        teacher_column_id=assignment.teacher_column_id,
        period_id=assignment.period_id,
        class_id=assignment.class_id,
        class_name=assignment.class_.name if assignment.class_ else None,
    )


def _serialize(timetable: Timetable) -> TimetableResponse:
    return TimetableResponse(
        id=timetable.id,
        name=timetable.name,
        created_at=timetable.created_at,
        updated_at=timetable.updated_at,
        teacher_columns=[_column_response(c) for c in timetable.teacher_columns],
        periods=[TimetablePeriodResponse.model_validate(p) for p in timetable.periods],
        assignments=[_assignment_response(a) for a in timetable.assignments],
    )


def _get_timetable(db: Session, timetable_id: uuid.UUID):
    return db.query(Timetable).filter(Timetable.id == timetable_id).first()


# ==================== TIMETABLES ====================


@router.get("", response_model=APIResponse)
def list_timetables(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    timetables = db.query(Timetable).order_by(Timetable.created_at.asc()).all()
    return {
        "success": True,
        "message": "Timetables retrieved successfully",
        "data": [_serialize(t) for t in timetables],
    }


@router.get("/{timetable_id}", response_model=APIResponse)
def get_timetable(
    timetable_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}
    return {"success": True, "message": "Timetable retrieved successfully", "data": _serialize(timetable)}


@router.post("", response_model=APIResponse)
def create_timetable(
    timetable_in: TimetableCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    timetable = Timetable(name=timetable_in.name, created_by=current_user.id)
    db.add(timetable)
    db.commit()
    db.refresh(timetable)
    logger.info("[timetable] %s created by %s", timetable.id, current_user.id)
    return {"success": True, "message": "Timetable created", "data": _serialize(timetable)}


@router.patch("/{timetable_id}", response_model=APIResponse)
def rename_timetable(
    timetable_id: uuid.UUID,
    timetable_in: TimetableCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}

    timetable.name = timetable_in.name
    _touch(timetable)
    db.commit()
    db.refresh(timetable)
    return {"success": True, "message": "Timetable renamed", "data": _serialize(timetable)}


@router.delete("/{timetable_id}", response_model=APIResponse)
def delete_timetable(
    timetable_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}

    db.delete(timetable)
    db.commit()
    return {"success": True, "message": "Timetable deleted", "data": None}


# ==================== TEACHER COLUMNS ====================


@router.post("/{timetable_id}/teachers", response_model=APIResponse)
def add_teacher_column(
    timetable_id: uuid.UUID,
    teacher_in: TimetableTeacherAdd,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}

    teacher = db.query(Profile).filter(Profile.id == teacher_in.teacher_id).first()
    if not teacher or teacher.role.value not in STAFF_ROLES:
        return {"success": False, "message": "Teacher not found", "data": None}
    if any(c.teacher_id == teacher.id for c in timetable.teacher_columns):
        return {"success": False, "message": "This teacher is already on the timetable", "data": None}

    next_position = max((c.position for c in timetable.teacher_columns), default=-1) + 1
    column = TimetableTeacher(
        timetable_id=timetable.id, teacher_id=teacher.id, position=next_position
    )
    db.add(column)
    _touch(timetable)
    db.commit()
    db.refresh(column)
    return {"success": True, "message": "Teacher added", "data": _column_response(column)}


@router.delete("/teachers/{column_id}", response_model=APIResponse)
def remove_teacher_column(
    column_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    column = db.query(TimetableTeacher).filter(TimetableTeacher.id == column_id).first()
    if not column:
        return {"success": False, "message": "Teacher column not found", "data": None}

    _touch(column.timetable)
    db.delete(column)
    db.commit()
    return {"success": True, "message": "Teacher removed from the timetable", "data": {"removed_id": str(column_id)}}


# ==================== PERIODS ====================


@router.post("/{timetable_id}/periods", response_model=APIResponse)
def add_period(
    timetable_id: uuid.UUID,
    period_in: TimetablePeriodCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}

    next_position = max((p.position for p in timetable.periods), default=-1) + 1
    period = TimetablePeriod(timetable_id=timetable.id, name=period_in.name, position=next_position)
    db.add(period)
    _touch(timetable)
    db.commit()
    db.refresh(period)
    return {"success": True, "message": "Period added", "data": TimetablePeriodResponse.model_validate(period)}


@router.patch("/periods/{period_id}", response_model=APIResponse)
def rename_period(
    period_id: uuid.UUID,
    period_in: TimetablePeriodCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    period = db.query(TimetablePeriod).filter(TimetablePeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}

    period.name = period_in.name
    _touch(period.timetable)
    db.commit()
    db.refresh(period)
    return {"success": True, "message": "Period renamed", "data": TimetablePeriodResponse.model_validate(period)}


@router.delete("/periods/{period_id}", response_model=APIResponse)
def delete_period(
    period_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    period = db.query(TimetablePeriod).filter(TimetablePeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}

    _touch(period.timetable)
    db.delete(period)
    db.commit()
    return {"success": True, "message": "Period deleted", "data": {"removed_id": str(period_id)}}


# ==================== CELLS ====================


def _resolve_cell(db: Session, timetable: Timetable, teacher_column_id, period_id):
    column = db.query(TimetableTeacher).filter(TimetableTeacher.id == teacher_column_id).first()
    if not column or column.timetable_id != timetable.id:
        return None, "That teacher is not on this timetable"
    period = db.query(TimetablePeriod).filter(TimetablePeriod.id == period_id).first()
    if not period or period.timetable_id != timetable.id:
        return None, "That period is not on this timetable"
    return (column, period), None


@router.put("/{timetable_id}/cells", response_model=APIResponse)
def set_cell_assignments(
    timetable_id: uuid.UUID,
    cell_in: TimetableCellAssign,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Replace the classes taught by one teacher in one period"""
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}

    cell, error = _resolve_cell(db, timetable, cell_in.teacher_column_id, cell_in.period_id)
    if error:
        return {"success": False, "message": error, "data": None}
    column, period = cell

    found = {row.id for row in db.query(Class.id).filter(Class.id.in_(cell_in.class_ids)).all()}
    missing = [class_id for class_id in cell_in.class_ids if class_id not in found]
    if missing:
        return {"success": False, "message": "Some classes were not found", "data": None}

    db.query(TimetableAssignment).filter(
        TimetableAssignment.teacher_column_id == column.id,
        TimetableAssignment.period_id == period.id,
    ).delete(synchronize_session=False)

    assignments = [
        TimetableAssignment(
            timetable_id=timetable.id,
            teacher_column_id=column.id,
            period_id=period.id,
            class_id=class_id,
        )
        for class_id in cell_in.class_ids
    ]
    db.add_all(assignments)
    _touch(timetable)
    db.commit()
    for assignment in assignments:
        db.refresh(assignment)

    return {
        "success": True,
        "message": "Classes assigned",
        "data": [_assignment_response(a) for a in assignments],
    }


@router.delete("/{timetable_id}/cells", response_model=APIResponse)
def clear_cell_assignments(
    timetable_id: uuid.UUID,
    teacher_column_id: uuid.UUID,
    period_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    timetable = _get_timetable(db, timetable_id)
    if not timetable:
        return {"success": False, "message": "Timetable not found", "data": None}

    cell, error = _resolve_cell(db, timetable, teacher_column_id, period_id)
    if error:
        return {"success": False, "message": error, "data": None}

    db.query(TimetableAssignment).filter(
        TimetableAssignment.teacher_column_id == teacher_column_id,
        TimetableAssignment.period_id == period_id,
    ).delete(synchronize_session=False)
    _touch(timetable)
    db.commit()
    return {"success": True, "message": "Cell cleared", "data": None}
